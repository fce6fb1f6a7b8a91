"""
JSON Schemas for payloads returned by the remote connection.

Remote payloads are untrusted: they are validated before any field is read.

Two schemas:
1. EXISTENCE_RESPONSE_SCHEMA — registration check result (list of {exists})
2. STATUS_PAYLOAD_SCHEMA     — status probe payload ({status, setAt})
"""

# =============================================================================
# 1. Registration check
# =============================================================================
EXISTENCE_RESPONSE_SCHEMA: dict = {
    "type": "array",
    "items": {
        "type": "object",
        "required": ["exists"],
        "properties": {
            "exists": {"type": "boolean"},
            "jid": {"type": "string"},
        },
    },
}

# =============================================================================
# 2. Status probe
# =============================================================================
STATUS_PAYLOAD_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "status": {"type": ["string", "null"]},
        "setAt": {
            "type": ["number", "null"],
            "minimum": 0,
            "description": "Epoch seconds at which the status text was set",
        },
    },
}
