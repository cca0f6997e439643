"""
Pytest configuration: fake psycopg2 connections and an in-memory store.
"""

import os
import sys

import psycopg2
import pytest

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from api_produtos import create_app  # noqa: E402
from api_produtos.models import Produto  # noqa: E402


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.rowcount = -1
        self._rows = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, params=None):
        self.conn.db.log.append(("execute", self.conn.dbname, sql, params))
        if self.conn.db.fail_execute and self.conn.db.fail_execute(sql):
            raise psycopg2.ProgrammingError(f"falha simulada: {sql}")
        self._rows = list(self.conn.db.results.pop(0)) if self.conn.db.results else []
        self.rowcount = len(self._rows)

    def fetchone(self):
        return self._rows.pop(0) if self._rows else None

    def fetchall(self):
        rows, self._rows = self._rows, []
        return rows


class FakeConnection:
    def __init__(self, db, dbname):
        self.db = db
        self.dbname = dbname
        self.autocommit = False
        self.closed = False

    def cursor(self, **kwargs):
        return FakeCursor(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.db.log.append(("rollback" if exc_type else "commit", self.dbname))
        return False

    def close(self):
        if not self.closed:
            self.closed = True
            self.db.open_count -= 1
            self.db.log.append(("close", self.dbname))


class FakeDatabase:
    """Substitui `psycopg2.connect` registrando tudo o que acontece."""

    def __init__(self):
        self.log = []
        self.connections = []
        self.open_count = 0
        self.max_open = 0
        self.fail_connect = set()
        self.fail_execute = None
        # uma lista de linhas por execute, consumidas em ordem
        self.results = []

    def connect(self, **params):
        dbname = params.get("dbname")
        self.log.append(("connect", dbname))
        if dbname in self.fail_connect:
            raise psycopg2.OperationalError(f'banco "{dbname}" indisponível')
        conn = FakeConnection(self, dbname)
        self.connections.append(conn)
        self.open_count += 1
        self.max_open = max(self.max_open, self.open_count)
        return conn

    def events(self, kind):
        return [e for e in self.log if e[0] == kind]

    def executed(self):
        return [e[2] for e in self.events("execute")]


@pytest.fixture
def fake_db(monkeypatch):
    db = FakeDatabase()
    monkeypatch.setattr(psycopg2, "connect", db.connect)
    return db


class MemoryStore:
    """Loja em memória com a mesma interface da `ProdutoStore`."""

    def __init__(self):
        self.produtos = {}
        self._next = 1

    def listar(self):
        return sorted(self.produtos.values(), key=lambda p: p.id, reverse=True)

    def buscar(self, id_produto):
        return self.produtos.get(id_produto)

    def criar(self, nome, preco):
        produto = Produto(id=self._next, nome=nome, preco=preco)
        self.produtos[produto.id] = produto
        self._next += 1
        return produto

    def substituir(self, id_produto, nome, preco):
        if id_produto not in self.produtos:
            return None
        self.produtos[id_produto] = Produto(id=id_produto, nome=nome, preco=preco)
        return self.produtos[id_produto]

    def atualizar(self, id_produto, nome=None, preco=None):
        atual = self.produtos.get(id_produto)
        if atual is None:
            return None
        novo = Produto(
            id=id_produto,
            nome=nome if nome is not None else atual.nome,
            preco=preco if preco is not None else atual.preco,
        )
        self.produtos[id_produto] = novo
        return novo

    def remover(self, id_produto):
        return self.produtos.pop(id_produto, None) is not None


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def client(store):
    app = create_app(store=store)
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture
def reset_env(tmp_path):
    schema = tmp_path / "schema.sql"
    schema.write_text(
        "CREATE TABLE produtos (id SERIAL PRIMARY KEY, nome TEXT NOT NULL, preco NUMERIC(10,2) NOT NULL);\n"
        "INSERT INTO produtos (nome, preco) VALUES ('Caneta', 5.50);\n",
        encoding="utf-8",
    )
    return {
        "DB_HOST": "localhost",
        "DB_PORT": "5432",
        "DB_USER": "app",
        "DB_PASSWORD": "segredo",
        "DB_DATABASE": "loja",
        "DB_DATABASE_FILE_PATH": str(schema),
    }
