"""Helpers for reading JSON requests in the API blueprints."""
from flask import request
from pydantic import ValidationError as SchemaError

from kaos_inventory.exceptions import ValidationError


def parse_body(schema):
    """
    Validate the JSON body against a pydantic schema.

    Raises:
        ValidationError: Body missing, not JSON, or rejected by the schema
            (field messages in payload['errors'])
    """
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError('Body JSON diperlukan')

    try:
        return schema.model_validate(data)
    except SchemaError as e:
        errors = [
            {'field': '.'.join(str(part) for part in err['loc']), 'message': err['msg']}
            for err in e.errors()
        ]
        first = errors[0]
        message = f"Data tidak valid: {first['field']} - {first['message']}" if first['field'] \
            else f"Data tidak valid: {first['message']}"
        raise ValidationError(message, payload={'errors': errors})


def int_arg(name, default=None):
    """Integer query parameter, or default when missing."""
    value = request.args.get(name)
    if value is None or value == '':
        return default
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"Parameter '{name}' harus berupa angka")
