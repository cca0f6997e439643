#!/usr/bin/env python3
import argparse
import logging
import os
import sys

from api_produtos import config
from api_produtos.reset import Failure, FailureKind, run

logger = logging.getLogger("reset_database")

EXIT_FAILURE = 1


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Recria o banco de dados alvo e aplica o arquivo SQL de schema")
    p.add_argument("--env-file", default=".env", help="Arquivo .env com as variáveis DB_* (padrão: .env)")
    p.add_argument("--verbose", action="store_true", help="Mostra mensagens de depuração")
    return p.parse_args(argv)


def main(argv=None, environ=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    if environ is None:
        config.load_env_file(args.env_file)
        environ = os.environ

    try:
        cfg = config.load_reset_config(environ)
    except config.ConfigurationError as e:
        failure = Failure(FailureKind.CONFIGURATION_MISSING, str(e))
        logger.error("Erro: %s", failure)
        return EXIT_FAILURE

    logger.info("--- Iniciando processo de reset do banco de dados ---")
    failure = run(cfg)
    if failure is not None:
        logger.error("ERRO FATAL: Não foi possível resetar o banco de dados.")
        logger.error("%s (%s)", failure, failure.kind.value)
        return EXIT_FAILURE

    logger.info("Processo de reset finalizado com sucesso!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
