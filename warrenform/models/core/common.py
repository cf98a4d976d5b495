class AttributeRef:
    """
    Describes one attribute of a Warren resource as the orchestrator sees it.

    Only declarative metadata lives here. The change planner in warrenform.diff
    reads it to decide whether a difference between prior state and desired
    configuration is an in-place update, a replacement or no change at all.
    """

    def __init__(
        self,
        name: str,
        required: bool = False,
        optional: bool = False,
        computed: bool = False,
        requires_replace: bool = False,
        sensitive: bool = False,
        input_only: bool = False,
    ):
        """
        :param name: The attribute name in canonical state.
        :param required: The attribute must be set in the desired configuration.
        :param optional: The attribute may be set in the desired configuration.
        :param computed: The platform fills the attribute in. A computed attribute
            left unset in the desired configuration never counts as a change.
        :param requires_replace: A change destroys and re-creates the resource.
        :param sensitive: The value must not be displayed, e.g. by the CLI.
        :param input_only: The platform never reports the value back, so the
            attribute is carried from the desired configuration into state and
            skipped by drift detection.
        """
        if required and optional:
            raise ValueError(f"Attribute {name} cannot be both required and optional.")
        self.name = name
        self.required = required
        self.optional = optional
        self.computed = computed
        self.requires_replace = requires_replace
        self.sensitive = sensitive
        self.input_only = input_only

    @property
    def configurable(self) -> bool:
        return self.required or self.optional

    def __repr__(self) -> str:
        return f"AttributeRef({self.name!r})"
