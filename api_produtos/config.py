"""
Configuração lida do ambiente (opcionalmente de um `.env` via python-dotenv).

As variáveis são lidas uma única vez para objetos imutáveis que depois são
passados explicitamente para quem precisa (servidor e script de reset).
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv

DEFAULT_ADMIN_DATABASE = "postgres"
DEFAULT_PORT = 3000

CONNECTION_VARS = ["DB_HOST", "DB_PORT", "DB_USER", "DB_PASSWORD", "DB_DATABASE"]
RESET_VARS = CONNECTION_VARS + ["DB_DATABASE_FILE_PATH"]


class ConfigurationError(ValueError):
    pass


class ConfigurationMissing(ConfigurationError):
    def __init__(self, variable: str):
        super().__init__(f"A variável de ambiente {variable} não está definida.")
        self.variable = variable


@dataclass(frozen=True)
class DatabaseConfig:
    host: str
    port: int
    user: str
    password: str
    database: str

    def connect_params(self) -> Dict[str, object]:
        """Parâmetros para `psycopg2.connect` no banco da aplicação."""
        return {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "dbname": self.database,
        }


@dataclass(frozen=True)
class ResetConfig:
    db: DatabaseConfig
    schema_path: Path
    admin_database: str = DEFAULT_ADMIN_DATABASE
    admin_password: Optional[str] = None

    def admin_params(self) -> Dict[str, object]:
        # sem senha própria de admin, usa a mesma do banco alvo
        params = self.db.connect_params()
        params["dbname"] = self.admin_database
        params["password"] = self.admin_password or self.db.password
        return params

    def app_params(self) -> Dict[str, object]:
        return self.db.connect_params()


def load_env_file(path: str = ".env") -> bool:
    # variáveis já presentes no ambiente têm prioridade sobre o arquivo
    return load_dotenv(path, override=False)


def check_required(environ: Mapping[str, str], names) -> None:
    for name in names:
        if not environ.get(name):
            raise ConfigurationMissing(name)


def _port(environ: Mapping[str, str]) -> int:
    raw = environ["DB_PORT"]
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"A variável de ambiente DB_PORT deve ser numérica (recebido: {raw!r}).")


def load_database_config(environ: Optional[Mapping[str, str]] = None) -> DatabaseConfig:
    if environ is None:
        environ = os.environ
    check_required(environ, CONNECTION_VARS)
    return DatabaseConfig(
        host=environ["DB_HOST"],
        port=_port(environ),
        user=environ["DB_USER"],
        password=environ["DB_PASSWORD"],
        database=environ["DB_DATABASE"],
    )


def load_reset_config(environ: Optional[Mapping[str, str]] = None, cwd: Optional[Path] = None) -> ResetConfig:
    """Valida todas as variáveis do reset antes de qualquer conexão.

    A validação é tudo-ou-nada: a primeira variável ausente interrompe com
    `ConfigurationMissing`. O caminho do schema é resolvido a partir do
    diretório corrente.
    """
    if environ is None:
        environ = os.environ
    check_required(environ, RESET_VARS)
    db = load_database_config(environ)
    base = Path(cwd) if cwd is not None else Path.cwd()
    return ResetConfig(
        db=db,
        schema_path=(base / environ["DB_DATABASE_FILE_PATH"]).resolve(),
        admin_database=environ.get("DB_ADMIN_DATABASE") or DEFAULT_ADMIN_DATABASE,
        admin_password=environ.get("DB_ADMIN_PASSWORD") or None,
    )


def server_port(environ: Optional[Mapping[str, str]] = None) -> int:
    if environ is None:
        environ = os.environ
    try:
        return int(environ.get("PORT") or DEFAULT_PORT)
    except ValueError:
        raise ConfigurationError(f"A variável de ambiente PORT deve ser numérica (recebido: {environ.get('PORT')!r}).")


def debug_enabled(environ: Optional[Mapping[str, str]] = None) -> bool:
    if environ is None:
        environ = os.environ
    return str(environ.get("FLASK_DEBUG", "")).lower() in ("1", "true", "yes")
