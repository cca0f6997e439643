"""
Reset do banco de dados alvo: recria o banco vazio e aplica o arquivo SQL.

Fluxo:
  1. Conecta como admin, derruba as conexões com o banco alvo, executa
     DROP DATABASE IF EXISTS e CREATE DATABASE; fecha a conexão admin.
  2. Lê o arquivo de schema, conecta no banco recém-criado e executa todo o
     conteúdo de uma vez; fecha a conexão da aplicação.

As fases não lançam exceções para erros de banco ou de arquivo: devolvem uma
`Failure` (ou None em caso de sucesso). Nunca há duas conexões abertas ao
mesmo tempo.

Atenção: o nome do banco é interpolado direto no texto do DROP/CREATE (não é
parametrizado). O nome vem da configuração do operador e não é escapado.
"""
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import psycopg2

from .config import ResetConfig

logger = logging.getLogger(__name__)

SQL_TERMINATE = (
    "SELECT pg_terminate_backend(pid) FROM pg_stat_activity "
    "WHERE datname = %s AND pid <> pg_backend_pid()"
)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class FailureKind(Enum):
    CONFIGURATION_MISSING = "configuration_missing"
    FILE_READ = "file_read"
    DATABASE_OPERATION = "database_operation"


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    message: str
    cause: Optional[BaseException] = None

    def __str__(self):
        if self.cause is None:
            return self.message
        return f"{self.message}: {self.cause}"


def drop_database_sql(name: str) -> str:
    return f"DROP DATABASE IF EXISTS {name}"


def create_database_sql(name: str) -> str:
    return f"CREATE DATABASE {name}"


def is_plain_identifier(name: str) -> bool:
    return bool(_IDENTIFIER.match(name))


def reset_database(config: ResetConfig) -> Optional[Failure]:
    target = config.db.database
    if not is_plain_identifier(target):
        logger.warning('O nome do banco "%s" não é um identificador simples e será usado sem escape.', target)

    try:
        admin = psycopg2.connect(**config.admin_params())
    except psycopg2.Error as e:
        return Failure(FailureKind.DATABASE_OPERATION, f'Falha ao conectar como admin em "{config.admin_database}"', e)

    try:
        # DROP/CREATE DATABASE não podem rodar dentro de transação
        admin.autocommit = True
        logger.info('- Conectado como admin ao banco "%s".', config.admin_database)
        with admin.cursor() as cur:
            logger.info('- Derrubando conexões existentes com "%s"...', target)
            cur.execute(SQL_TERMINATE, (target,))
            logger.debug("%d sessões finalizadas.", max(cur.rowcount, 0))

            logger.info('- Recriando o banco de dados "%s"...', target)
            cur.execute(drop_database_sql(target))
            cur.execute(create_database_sql(target))
        logger.info("- Banco de dados recriado com sucesso.")
    except psycopg2.Error as e:
        return Failure(FailureKind.DATABASE_OPERATION, f'Falha ao recriar o banco "{target}"', e)
    finally:
        admin.close()
        logger.info("- Conexão de admin encerrada.")
    return None


def read_schema(config: ResetConfig):
    """Lê o arquivo SQL inteiro. Devolve (texto, None) ou (None, Failure)."""
    logger.info("- Lendo SQL do arquivo: %s", config.schema_path)
    try:
        return config.schema_path.read_text(encoding="utf-8"), None
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Erro fatal: Não foi possível ler o arquivo de schema em %s.", config.schema_path)
        return None, Failure(FailureKind.FILE_READ, f"Não foi possível ler o arquivo de schema em {config.schema_path}", e)


def apply_schema(config: ResetConfig) -> Optional[Failure]:
    sql, failure = read_schema(config)
    if failure is not None:
        return failure

    target = config.db.database
    try:
        conn = psycopg2.connect(**config.app_params())
    except psycopg2.Error as e:
        return Failure(FailureKind.DATABASE_OPERATION, f'Falha ao conectar no banco "{target}"', e)

    try:
        logger.info('- Conectado ao banco "%s" para aplicar o schema.', target)
        # sem parâmetros o psycopg2 envia o texto sem interpretar "%"
        with conn:
            with conn.cursor() as cur:
                cur.execute(sql)
        logger.info("- Schema SQL aplicado com sucesso.")
    except psycopg2.Error as e:
        return Failure(FailureKind.DATABASE_OPERATION, f'Falha ao aplicar o schema em "{target}"', e)
    finally:
        conn.close()
        logger.info("- Conexão da aplicação encerrada.")
    return None


def run(config: ResetConfig) -> Optional[Failure]:
    """Reset seguido do seed; o seed só roda se o reset não falhar."""
    failure = reset_database(config)
    if failure is not None:
        return failure
    return apply_schema(config)
