"""API REST de produtos (Flask + PostgreSQL)."""
from flask import Flask

from .config import load_database_config
from .routes.routes import api
from .storage import ProdutoStore


def create_app(store=None, db_config=None) -> Flask:
    """Monta a aplicação Flask.

    Sem `store`, cria uma `ProdutoStore` a partir de `db_config` (ou das
    variáveis DB_* do ambiente).
    """
    app = Flask(__name__)
    app.json.ensure_ascii = False
    app.json.sort_keys = False

    if store is None:
        if db_config is None:
            db_config = load_database_config()
        store = ProdutoStore(db_config.connect_params())
    app.extensions["produtos_store"] = store

    app.register_blueprint(api)
    return app
