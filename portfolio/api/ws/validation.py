from jsonschema import ValidationError, validate

from portfolio.logging import logger
from portfolio.schemas.envelope import Envelope, ReplyEnvelope
from portfolio.schemas.generic_typing import JsonSchemaType


def validator(
    envelope: Envelope, schema: JsonSchemaType
) -> ReplyEnvelope | None:
    """
    Validates the data field of an Envelope against the provided JSON schema.

    Args:
        envelope (Envelope): The envelope to validate.
        schema (JsonSchemaType): The JSON schema to validate ``data`` against.

    Returns:
        ReplyEnvelope | None: An error reply if the data is invalid,
        otherwise None.
    """
    try:
        validate(envelope.data, schema)  # JSON schema validation
    except ValidationError as ex:
        logger.error(f"Invalid data for type {envelope.type}: \n{ex.message}")

        return ReplyEnvelope.error(
            envelope.type,
            envelope.id,
            f"Invalid data: {ex.message}",
            status_code=400,
        )
    return None
