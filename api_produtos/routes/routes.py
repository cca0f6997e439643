import logging
import math

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

"""
Rotas do recurso "produtos". O acesso ao banco fica em `api_produtos.storage`;
a loja usada é a registrada em `app.extensions["produtos_store"]`.
"""

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__)

ERRO_ID = "id inválido"
ERRO_NAO_ENCONTRADO = "não encontrado"
ERRO_CAMPOS = "nome e preco (>= 0) obrigatórios"
ERRO_PATCH_VAZIO = "envie nome e/ou preco"
ERRO_PRECO = "preco deve ser número >= 0"
ERRO_NOME = "nome deve ser um texto não vazio"


def _store():
    return current_app.extensions["produtos_store"]


def _erro(mensagem, status):
    return jsonify({"erro": mensagem}), status


def parse_id(raw):
    """Converte o id da URL; None se não for um inteiro positivo."""
    try:
        valor = int(str(raw).strip())
    except ValueError:
        return None
    if valor <= 0:
        return None
    return valor


def parse_preco(raw):
    """Converte o preço recebido; None se ausente, não numérico ou negativo."""
    # bool é subclasse de int, mas True/False não são preço
    if raw is None or isinstance(raw, bool):
        return None
    try:
        valor = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(valor) or valor < 0:
        return None
    return valor


def _nome_valido(nome):
    return isinstance(nome, str) and nome != ""


def _corpo():
    # sem JSON (ou JSON que não é objeto) conta como corpo vazio
    dados = request.get_json(silent=True)
    if not isinstance(dados, dict):
        return {}
    return dados


@api.errorhandler(Exception)
def erro_interno(e):
    if isinstance(e, HTTPException):
        return e
    logger.exception("Erro inesperado em %s %s", request.method, request.path)
    return _erro("erro interno", 500)


@api.route("/produtos", methods=["GET"])
def listar_produtos():
    produtos = _store().listar()
    return jsonify([p.to_dict() for p in produtos])


@api.route("/produtos/<id_produto>", methods=["GET"])
def mostrar_produto(id_produto):
    id_int = parse_id(id_produto)
    if id_int is None:
        return _erro(ERRO_ID, 400)

    produto = _store().buscar(id_int)
    if produto is None:
        return _erro(ERRO_NAO_ENCONTRADO, 404)
    return jsonify(produto.to_dict())


@api.route("/produtos", methods=["POST"])
def criar_produto():
    dados = _corpo()
    nome = dados.get("nome")
    preco = parse_preco(dados.get("preco"))
    if not _nome_valido(nome) or preco is None:
        return _erro(ERRO_CAMPOS, 400)

    produto = _store().criar(nome, preco)
    return jsonify(produto.to_dict()), 201


@api.route("/produtos/<id_produto>", methods=["PUT"])
def substituir_produto(id_produto):
    id_int = parse_id(id_produto)
    if id_int is None:
        return _erro(ERRO_ID, 400)

    dados = _corpo()
    nome = dados.get("nome")
    preco = parse_preco(dados.get("preco"))
    if not _nome_valido(nome) or preco is None:
        return _erro(ERRO_CAMPOS, 400)

    # representação completa: os dois campos são substituídos
    produto = _store().substituir(id_int, nome, preco)
    if produto is None:
        return _erro(ERRO_NAO_ENCONTRADO, 404)
    return jsonify(produto.to_dict())


@api.route("/produtos/<id_produto>", methods=["PATCH"])
def atualizar_produto(id_produto):
    id_int = parse_id(id_produto)
    if id_int is None:
        return _erro(ERRO_ID, 400)

    dados = _corpo()
    if "nome" not in dados and "preco" not in dados:
        return _erro(ERRO_PATCH_VAZIO, 400)

    # campos ausentes (ou null) viram None e mantêm o valor atual no banco
    nome = dados.get("nome")
    if nome is not None and not _nome_valido(nome):
        return _erro(ERRO_NOME, 400)

    preco = None
    if "preco" in dados:
        preco = parse_preco(dados["preco"])
        if preco is None:
            return _erro(ERRO_PRECO, 400)

    produto = _store().atualizar(id_int, nome=nome, preco=preco)
    if produto is None:
        return _erro(ERRO_NAO_ENCONTRADO, 404)
    return jsonify(produto.to_dict())


@api.route("/produtos/<id_produto>", methods=["DELETE"])
def remover_produto(id_produto):
    id_int = parse_id(id_produto)
    if id_int is None:
        return _erro(ERRO_ID, 400)

    if not _store().remover(id_int):
        return _erro(ERRO_NAO_ENCONTRADO, 404)
    return "", 204
