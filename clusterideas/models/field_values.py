"""Field-value store codec.

Item values are keyed by field *name*, not by field definition id, and are
persisted as one JSON object. Keys that no longer match a current field
definition are kept ("archived") and are never removed by schema edits.
"""

import json
import logging
from typing import Dict, Mapping, Optional, Union

logger = logging.getLogger(__name__)

FieldValues = Dict[str, str]


def encode_field_values(values: Mapping[str, str]) -> str:
    """Serialize a whole field-value mapping."""
    return json.dumps(dict(values), ensure_ascii=False)


def decode_field_values(data: Optional[Union[str, bytes]]) -> FieldValues:
    """
    Deserialize a field-value mapping.

    Absent, unreadable, or mistyped data yields an empty mapping rather than
    an error.
    """
    if not data:
        return {}

    try:
        decoded = json.loads(data)
    except (ValueError, UnicodeDecodeError) as e:
        logger.debug("Discarding unreadable field values: %s", e)
        return {}

    if not isinstance(decoded, dict):
        logger.debug("Discarding field values of type %s", type(decoded).__name__)
        return {}

    if not all(isinstance(k, str) and isinstance(v, str) for k, v in decoded.items()):
        logger.debug("Discarding field values with non-string entries")
        return {}

    return decoded
