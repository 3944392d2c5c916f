from flask import abort, jsonify, request


def envelope(success, message="", data=None, status=200):
    """Build the ``{success, message, data}`` body every endpoint returns"""
    body = {
        "success": success,
        "message": message,
        "data": data if data is not None else {},
    }
    return jsonify(body), status


def json_body():
    """Return the request's JSON object, aborting with 400 for anything else"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        abort(400)
    return data


def list_field(data, name):
    """Return data[name] if it is a JSON array, otherwise an empty list"""
    value = data.get(name)
    return value if isinstance(value, list) else []


def pick_fields(items, names):
    """Copy only the named keys of each JSON object, anything else becomes {}"""
    return [
        {name: item.get(name) for name in names} if isinstance(item, dict) else {}
        for item in items
    ]
