"""
CLI: muestra el SQL que genera un filterByFormula.

Sin --base solo traduce (los linked records no se resuelven, no hay
conexion). Con --base y --table consulta la base y lista la primera pagina.

Ejecucion:
  python scripts/explain_formula.py "AND({status} = 'active', SEARCH('x', {name}))"
  python scripts/explain_formula.py "{report_id} = 'R-001'" --base appgiPT2PnR2JrVzI --table markers
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from loguru import logger
from dotenv import load_dotenv

# Permite ejecutar este script desde cualquier cwd sin configurar PYTHONPATH.
_API_ROOT = Path(__file__).resolve().parents[1]
if str(_API_ROOT) not in sys.path:
    sys.path.insert(0, str(_API_ROOT))

load_dotenv(_API_ROOT / ".env", override=False)
load_dotenv(_API_ROOT.parent / ".env", override=False)

from airtable_pg.adapter import create_base_from_id
from airtable_pg.domain.entities.record import Record
from airtable_pg.infrastructure.database.pool_registry import pool_registry
from airtable_pg.infrastructure.formula.translator import FormulaTranslator
from airtable_pg.infrastructure.records.linked_records import LinkedRecordResolver
from airtable_pg.infrastructure.repositories.query_executor import build_select_sql
from airtable_pg.shared.exceptions.base import AppException
from airtable_pg.shared.utils.identifiers import normalize_identifier


def _explain(formula: str, table: str, strict: bool) -> None:
    # Sin mapeos de link: no hay lookups contra la base
    translator = FormulaTranslator(LinkedRecordResolver(mappings={}), strict=strict)
    clause = translator.translate(None, formula, table, {})
    if clause is None:
        print("-- la formula no aporta predicado (se listaria sin filtro)")
    sql, params = build_select_sql(table, clause, [], page_size=100, offset=0)
    print(sql)
    print(f"-- params: {params}")


def _print_records(records: list[Record]) -> None:
    for record in records:
        print(json.dumps(record.to_envelope(), ensure_ascii=False, default=str))


def main() -> int:
    parser = argparse.ArgumentParser(description="Traduce filterByFormula a SQL.")
    parser.add_argument("formula", help="Formula estilo Airtable.")
    parser.add_argument(
        "--table",
        default="records",
        help="Tabla destino (se normaliza igual que en la API).",
    )
    parser.add_argument(
        "--base",
        default=None,
        help="Id de base Airtable (BASE_MAP). Si se indica, ejecuta la consulta.",
    )
    parser.add_argument(
        "--max-records",
        type=int,
        default=10,
        help="Records a listar cuando se ejecuta la consulta.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Falla ante sintaxis no soportada en vez de ignorarla.",
    )
    args = parser.parse_args()

    table = normalize_identifier(args.table)
    try:
        _explain(args.formula, table, args.strict)
        if args.base:
            base = create_base_from_id(args.base)
            records = base(table).select(
                filterByFormula=args.formula,
                maxRecords=args.max_records,
            ).first_page()
            logger.info(f"{len(records)} records en '{table}'")
            _print_records(records)
    except AppException as e:
        logger.error(f"{e.error_code}: {e.message}")
        return 1
    finally:
        if args.base:
            pool_registry.close_all()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
