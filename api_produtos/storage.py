import logging
from contextlib import contextmanager
from typing import Dict, List, Optional

import psycopg2
from psycopg2.extras import RealDictCursor

from .models import Produto

logger = logging.getLogger(__name__)

SQL_LISTAR = "SELECT * FROM produtos ORDER BY id DESC"
SQL_BUSCAR = "SELECT * FROM produtos WHERE id = %s"
SQL_CRIAR = "INSERT INTO produtos (nome, preco) VALUES (%s, %s) RETURNING *"
SQL_SUBSTITUIR = "UPDATE produtos SET nome = %s, preco = %s WHERE id = %s RETURNING *"
# COALESCE mantém o valor atual quando o campo chega como NULL
SQL_ATUALIZAR = (
    "UPDATE produtos SET nome = COALESCE(%s, nome), preco = COALESCE(%s, preco) "
    "WHERE id = %s RETURNING *"
)
SQL_REMOVER = "DELETE FROM produtos WHERE id = %s RETURNING id"


class ProdutoStore:
    """Acesso à tabela `produtos` no PostgreSQL.

    Abre uma conexão curta por operação: commit se tudo der certo, rollback
    em caso de erro e fechamento sempre.
    """

    def __init__(self, connect_params: Dict[str, object]):
        self.connect_params = dict(connect_params)

    @contextmanager
    def _cursor(self):
        conn = psycopg2.connect(**self.connect_params)
        try:
            with conn:
                with conn.cursor(cursor_factory=RealDictCursor) as cur:
                    yield cur
        finally:
            conn.close()

    def listar(self) -> List[Produto]:
        with self._cursor() as cur:
            cur.execute(SQL_LISTAR)
            return [Produto.from_row(r) for r in cur.fetchall()]

    def buscar(self, id_produto: int) -> Optional[Produto]:
        with self._cursor() as cur:
            cur.execute(SQL_BUSCAR, (id_produto,))
            return self._um(cur)

    def criar(self, nome: str, preco: float) -> Produto:
        with self._cursor() as cur:
            cur.execute(SQL_CRIAR, (nome, preco))
            produto = self._um(cur)
        logger.info("Produto %s criado", produto.id)
        return produto

    def substituir(self, id_produto: int, nome: str, preco: float) -> Optional[Produto]:
        with self._cursor() as cur:
            cur.execute(SQL_SUBSTITUIR, (nome, preco, id_produto))
            return self._um(cur)

    def atualizar(self, id_produto: int, nome: Optional[str] = None, preco: Optional[float] = None) -> Optional[Produto]:
        with self._cursor() as cur:
            cur.execute(SQL_ATUALIZAR, (nome, preco, id_produto))
            return self._um(cur)

    def remover(self, id_produto: int) -> bool:
        with self._cursor() as cur:
            cur.execute(SQL_REMOVER, (id_produto,))
            removido = cur.rowcount > 0
        if removido:
            logger.info("Produto %s removido", id_produto)
        return removido

    @staticmethod
    def _um(cur) -> Optional[Produto]:
        row = cur.fetchone()
        if row is None:
            return None
        return Produto.from_row(row)
