import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any
from typing import Dict
from typing import Iterator
from typing import Optional

from warrenform.client.errors import classify_error
from warrenform.client.errors import is_not_found
from warrenform.client.errors import ReconcileError
from warrenform.client.errors import UnsupportedOperationError
from warrenform.client.transport import WarrenClient
from warrenform.diff import plan_changes
from warrenform.diff import ResourceDiff
from warrenform.diff import validate_desired
from warrenform.models.core.resources import WarrenResourceSchema
from warrenform.stats import get_stats_client

logger = logging.getLogger(__name__)
stat_handler = get_stats_client(__name__)


@dataclass
class CreateTransaction:
    """
    Identifier of the primary resource a create call has made so far.

    Passed down the create chain so a failed create can delete what it made.
    Stays empty when the create reused an existing resource.
    """

    created_id: Optional[str] = None

    def record(self, created_id: Any) -> None:
        self.created_id = str(created_id)

    @property
    def has_created(self) -> bool:
        return self.created_id is not None


@contextmanager
def classified_errors(resource_type: str) -> Iterator[None]:
    """Re-raise transport errors of the block as domain errors of `resource_type`."""
    try:
        yield
    except Exception as e:
        classified = classify_error(e, resource_type)
        if classified is e:
            raise
        raise classified from e


class Reconciler:
    """
    Maps the lifecycle of one Warren resource type onto platform API calls.

    Subclasses set `resource_type` (the error classifier key) and `schema`, and
    implement the hooks below. State is a plain dict of attribute values.
    Operations that fail raise ReconcileError with the classified error chained.
    """

    resource_type: str = ""
    schema: WarrenResourceSchema

    def __init__(self, client: WarrenClient) -> None:
        self.client = client

    # Hooks

    def _get(self, client: WarrenClient, resource_id: str) -> Dict[str, Any]:
        raise NotImplementedError

    def _to_state(
        self,
        client: WarrenClient,
        remote: Dict[str, Any],
        prior: Dict[str, Any],
    ) -> Dict[str, Any]:
        raise NotImplementedError

    def _create(
        self,
        client: WarrenClient,
        desired: Dict[str, Any],
        transaction: CreateTransaction,
    ) -> Dict[str, Any]:
        raise NotImplementedError

    def _cleanup(self, client: WarrenClient, transaction: CreateTransaction) -> None:
        raise NotImplementedError

    def _update(
        self,
        client: WarrenClient,
        prior: Dict[str, Any],
        desired: Dict[str, Any],
        diff: ResourceDiff,
    ) -> Dict[str, Any]:
        raise NotImplementedError

    def _delete(self, client: WarrenClient, remote: Dict[str, Any]) -> None:
        raise NotImplementedError

    # Operations

    def create(self, desired: Dict[str, Any]) -> Dict[str, Any]:
        validate_desired(self.schema, desired)
        client = self._client_for(desired)
        transaction = CreateTransaction()
        logger.info("Creating %s.", self.schema.type_name)
        try:
            state = self._create(client, desired, transaction)
        except Exception as e:
            if transaction.has_created:
                self._run_cleanup(client, transaction)
            raise self._failure("create", transaction.created_id, e)
        logger.info("Created %s %s.", self.schema.type_name, state.get("id"))
        return state

    def read(self, state: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Refresh state from the platform.

        :return: The refreshed state, or None when the resource is gone.
        """
        resource_id = state["id"]
        client = self._client_for(state)
        try:
            remote = self._get(client, resource_id)
        except Exception as e:
            classified = classify_error(e, self.resource_type)
            if is_not_found(classified):
                logger.info("%s %s has been deleted.", self.schema.type_name, resource_id)
                return None
            raise self._failure("read", resource_id, classified)
        return self._to_state(client, remote, state)

    def update(self, prior: Dict[str, Any], desired: Dict[str, Any]) -> Dict[str, Any]:
        diff = plan_changes(self.schema, prior, desired)
        if diff.requires_replace:
            err = UnsupportedOperationError(
                f"Changing {', '.join(diff.replace_fields)} requires replacing the {self.schema.type_name}",
            )
            raise self._failure("update", prior.get("id"), err)
        if not diff.has_changes:
            return dict(prior)
        client = self._client_for(prior)
        logger.info(
            "Updating %s %s: %s.",
            self.schema.type_name,
            prior.get("id"),
            ", ".join(diff.update_fields),
        )
        try:
            return self._update(client, prior, desired, diff)
        except Exception as e:
            raise self._failure("update", prior.get("id"), e)

    def delete(self, state: Dict[str, Any]) -> None:
        """
        Delete the resource. Deleting a resource that no longer exists succeeds.
        """
        resource_id = state["id"]
        client = self._client_for(state)
        try:
            remote = self._get(client, resource_id)
            self._delete(client, remote)
        except Exception as e:
            classified = classify_error(e, self.resource_type)
            if is_not_found(classified):
                logger.debug("%s has already been deleted: %s", self.schema.type_name, resource_id)
                return
            raise self._failure("delete", resource_id, classified)
        logger.info("Deleted %s %s.", self.schema.type_name, resource_id)

    def import_state(self, resource_id: str, location: Optional[str] = None) -> Dict[str, Any]:
        client = self.client.for_location(location)
        try:
            remote = self._get(client, resource_id)
        except Exception as e:
            raise self._failure("import", resource_id, e)
        return self._to_state(client, remote, {"location": location})

    # Helpers

    def _client_for(self, state: Dict[str, Any]) -> WarrenClient:
        return self.client.for_location(state.get("location"))

    def _carry_inputs(self, state: Dict[str, Any], source: Dict[str, Any]) -> Dict[str, Any]:
        """Copy attributes the platform never reports from `source` into `state`."""
        for name in self.schema.input_only_attributes():
            state[name] = source.get(name)
        return state

    def _merged(self, prior: Dict[str, Any], desired: Dict[str, Any]) -> Dict[str, Any]:
        state = dict(prior)
        for attribute in self.schema.properties.attributes():
            if not attribute.configurable:
                continue
            value = desired.get(attribute.name)
            if value is None and attribute.computed:
                continue
            state[attribute.name] = value
        return state

    def _run_cleanup(self, client: WarrenClient, transaction: CreateTransaction) -> None:
        logger.info(
            "Cleaning up %s %s after failed create.",
            self.schema.type_name,
            transaction.created_id,
        )
        stat_handler.incr(f"{self.resource_type}.create_cleanup")
        try:
            self._cleanup(client, transaction)
        except Exception as cleanup_err:
            # Best effort: the create error is what gets reported.
            logger.warning(
                "Failed to clean up %s %s: %s",
                self.schema.type_name,
                transaction.created_id,
                cleanup_err,
            )

    def _failure(self, operation: str, resource_id: Optional[str], err: BaseException) -> ReconcileError:
        classified = classify_error(err, self.resource_type)
        if classified is not err and classified.__cause__ is None:
            classified.__cause__ = err
        failure = ReconcileError(self.schema.type_name, operation, resource_id, classified)
        failure.__cause__ = classified
        return failure
