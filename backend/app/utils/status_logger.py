import logging
from sqlalchemy import event
from sqlalchemy.orm.attributes import NO_VALUE

from .. import models

logger = logging.getLogger(__name__)

# model -> attribute holding its lifecycle state
_TRACKED = (
    (models.Tattoo, "status"),
    (models.ContactInquiry, "status"),
    (models.Artist, "verification_status"),
    (models.Salon, "verification_status"),
)


def _listener_factory(model_name: str, attribute: str):
    """Return a SQLAlchemy attribute listener that logs state changes."""

    def _status_change(target, value, oldvalue, initiator):  # noqa: ANN001
        if oldvalue is NO_VALUE or oldvalue is None or oldvalue == value:
            return value
        entity_id = getattr(target, "id", "unknown")
        logger.info(
            "%s id=%s %s changed from %s to %s",
            model_name,
            entity_id,
            attribute,
            getattr(oldvalue, "value", oldvalue),
            getattr(value, "value", value),
        )
        return value

    return _status_change


_registered = False


def register_status_listeners() -> None:
    """Attach listeners for every model with a tracked lifecycle attribute."""
    global _registered
    if _registered:
        return
    for model, attribute in _TRACKED:
        event.listen(
            getattr(model, attribute),
            "set",
            _listener_factory(model.__name__, attribute),
            retval=False,
            propagate=True,
        )
    _registered = True
