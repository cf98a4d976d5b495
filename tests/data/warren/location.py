LOCATIONS = [
    {
        "display_name": "Tallinn",
        "is_default": True,
        "is_preferred": False,
        "description": "Tallinn, Estonia",
        "order_nr": 1,
        "slug": "tll01",
        "country_code": "EE",
    },
    {
        "display_name": "Cyclone",
        "is_default": False,
        "is_preferred": True,
        "description": "Cyclone test location",
        "order_nr": 2,
        "slug": "cyc01",
        "country_code": "EE",
    },
]
