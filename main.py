"""Launcher que inicia a API de produtos.

Ao executar `python main.py` as variáveis são lidas do `.env` (se existir) e
o servidor Flask sobe na porta `PORT` (padrão 3000).
"""
import logging
import sys

from api_produtos import config, create_app


def run_server():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    config.load_env_file()
    try:
        app = create_app()
        port = config.server_port()
    except config.ConfigurationError as e:
        logging.error("Erro: %s", e)
        sys.exit(1)

    logging.info("API rodando em http://localhost:%d", port)
    app.run(host="0.0.0.0", port=port, debug=config.debug_enabled())


if __name__ == '__main__':
    run_server()
