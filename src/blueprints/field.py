from flask import Blueprint, request, jsonify, current_app
from exceptions import ValidationError
from model import ImageFieldValue
from datetime import datetime
import logging

logger = logging.getLogger(__name__)
field_bp = Blueprint("field", __name__)


def _load_value(field_name):
    field_store = current_app.config['FIELD_STORE']
    return ImageFieldValue.from_dict(field_store.get(field_name))


@field_bp.route('/field/<field_name>')
def field_page(field_name):
    registry = current_app.config['FIELD_REGISTRY']
    try:
        field = registry.get_field_instance(field_name)
        value = field.format(_load_value(field_name))
        return field.render(value)
    except Exception as e:
        logger.exception("EXCEPTION CAUGHT: " + str(e))
        return jsonify({"error": f"An error occurred: {str(e)}"}), 500


@field_bp.route('/field/<field_name>', methods=['POST'])
def save_field(field_name):
    registry = current_app.config['FIELD_REGISTRY']
    field_store = current_app.config['FIELD_STORE']

    error = None
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}
        value = ImageFieldValue.from_dict({"url": data.get("url"), "alt": data.get("alt")})

        field = registry.get_field_instance(field_name)
        try:
            field.clean(value)
        except ValidationError as e:
            error = e.message

        # the raw value is stored even when it does not validate
        value = field.on_save(value)
        field_store.save(field_name, value.to_dict())
        formatted = field.format(value).to_dict()
    except Exception as e:
        logger.exception("EXCEPTION CAUGHT: " + str(e))
        return jsonify({"error": f"An error occurred: {str(e)}"}), 500

    if error:
        return jsonify({"success": False, "error": error, "value": formatted}), 400
    return jsonify({"success": True, "value": formatted})


@field_bp.route('/field/<field_name>/value')
def field_value(field_name):
    registry = current_app.config['FIELD_REGISTRY']
    try:
        field = registry.get_field_instance(field_name)
        return jsonify(field.format(_load_value(field_name)).to_dict())
    except Exception as e:
        logger.exception("EXCEPTION CAUGHT: " + str(e))
        return jsonify({"error": f"An error occurred: {str(e)}"}), 500


@field_bp.route('/notices')
def notices():
    """Errors collected since the last admin page view, shown once."""
    error_log = current_app.config['ERROR_LOG']
    entries = error_log.drain()
    return jsonify([
        {
            "message": entry.message,
            "time": entry.time,
            "date": datetime.fromtimestamp(entry.time).strftime("%B %d, %Y"),
        }
        for entry in entries
    ])
