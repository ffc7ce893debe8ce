import logging
import os
from flask import Flask

from services.core import Settings
from services.session import CatalogSession
from viewer.catalog import bp as catalog_bp


def create_app(settings=None, session=None):
    app = Flask(__name__)
    app.json.sort_keys = False

    # One catalog session per process: caches and the catalog index are shared by all viewers.
    if session is None:
        session = CatalogSession(settings or Settings.from_env())
    app.extensions['catalog'] = session
    app.logger.info('Catalog session ready: %r', session.settings)

    app.register_blueprint(catalog_bp)
    return app


if __name__ == '__main__':
    logging.basicConfig(
        level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    port = int(os.environ.get('PORT', 5000))
    create_app().run(host='0.0.0.0', port=port, debug=True)
