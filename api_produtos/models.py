"""
Schemas leves (dataclasses) para as linhas da tabela `produtos`.
"""
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping


@dataclass
class Produto:
    id: int
    nome: str
    preco: float

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Produto":
        # NUMERIC chega como Decimal; a API expõe preço como número JSON
        return cls(id=int(row["id"]), nome=row["nome"], preco=float(row["preco"]))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
