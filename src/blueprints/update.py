from flask import Blueprint, request, jsonify, current_app
import logging

logger = logging.getLogger(__name__)
update_bp = Blueprint("update", __name__)


@update_bp.route('/update/info')
def plugin_info():
    update_checker = current_app.config['UPDATE_CHECKER']
    slug = request.args.get('slug', '')

    info = update_checker.info(None, "plugin_information", {"slug": slug})
    if info is None:
        return jsonify({"error": "Plugin information not available"}), 404
    return jsonify(info)


@update_bp.route('/update/check')
def check_update():
    update_checker = current_app.config['UPDATE_CHECKER']
    offer = update_checker.check_for_update()
    return jsonify({"update": offer.to_dict() if offer else None})


@update_bp.route('/update/complete', methods=['POST'])
def upgrade_complete():
    update_checker = current_app.config['UPDATE_CHECKER']
    options = request.get_json(silent=True)
    if not isinstance(options, dict):
        options = {}
    update_checker.purge(options)
    return jsonify({"success": True})
