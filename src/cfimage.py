#!/usr/bin/env python3

import logging
import logging.config
import argparse
from flask import Flask
from pi_heif import register_heif_opener
from waitress import serve
from config import Config
from blueprints.field import field_bp
from blueprints.update import update_bp
from fields.field_registry import FieldRegistry, FieldStore
from update.update_checker import UpdateChecker
from utils.cache_store import MemoryCacheStore
from utils.error_log import ErrorLog
from utils.http_client import close_http_session

logger = logging.getLogger(__name__)


def create_app(config, cache=None, session=None, loader=None):
    """
    Build the host application for the Cloudflare Image field.

    Args:
        config: Config instance
        cache: CacheStore shared by the dimension cache, error log and update checker
        session: requests.Session used for release metadata requests
        loader: ImageDimensionLoader used by the dimensions strategy
    """
    cache = cache or MemoryCacheStore()
    error_log = ErrorLog(cache, debug=config.debug, sink=logging.getLogger("cfimage.debug"))

    app = Flask(__name__)

    app.config['CONFIG'] = config
    app.config['CACHE'] = cache
    app.config['ERROR_LOG'] = error_log
    app.config['FIELD_STORE'] = FieldStore()
    app.config['FIELD_REGISTRY'] = FieldRegistry(config, cache, error_log, loader=loader)
    app.config['UPDATE_CHECKER'] = UpdateChecker(
        cache,
        session=session,
        cache_allowed=config.cache_allowed,
        host_version=config.host_version,
        runtime_version=config.runtime_version,
    )

    app.register_blueprint(field_bp)
    app.register_blueprint(update_bp)

    # Register opener for HEIF/HEIC originals
    register_heif_opener()

    return app


if __name__ == '__main__':
    logging.config.fileConfig(Config.LOGGING_CONF)

    parser = argparse.ArgumentParser(description='Cloudflare Image Field Host')
    parser.add_argument('--dev', action='store_true', help='Run in development mode')
    parser.add_argument('--strategy', choices=Config.STRATEGIES, default='variants',
                        help='How the field enriches stored URLs')
    args = parser.parse_args()

    if args.dev:
        PORT = 8080
        logger.info("Starting in DEVELOPMENT mode on port 8080")
    else:
        PORT = 80
        logger.info("Starting in PRODUCTION mode on port 80")
    logging.getLogger('waitress.queue').setLevel(logging.ERROR)

    app = create_app(Config(debug=args.dev, strategy=args.strategy))

    try:
        serve(app, host="0.0.0.0", port=PORT, threads=1)
    finally:
        close_http_session()
