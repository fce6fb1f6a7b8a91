"""
Esecuzione di una validazione batch contro una MockConnection.

Legge:
  - numeri da riga di comando, oppure
  - un file di testo con un numero per riga (--input)

Produce:
  - JSON dei risultati (--output, default: validation_results.json)
  - CSV opzionale (--csv)
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

from account_validator.config.settings import LOG_LEVEL
from account_validator.config.validator_config import ValidatorConfig
from account_validator.validation.connection import MockConnection
from account_validator.validation.events import EventType, ValidationEvent
from account_validator.validation.export import export_csv, export_json
from account_validator.validation.pipeline import ValidationPipeline

# ---------------------------------------------------------------------------
# Setup logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger("run_validation")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Validate account reachability in batch.")
    parser.add_argument("numbers", nargs="*", help="Phone numbers to validate")
    parser.add_argument("--input", type=Path, help="File with one phone number per line")
    parser.add_argument("--output", type=Path, default=Path("validation_results.json"))
    parser.add_argument("--csv", type=Path, help="Optional CSV export path")
    parser.add_argument("--batch-size", type=int, default=None)
    return parser.parse_args(argv)


def load_numbers(args: argparse.Namespace) -> list:
    numbers = list(args.numbers)
    if args.input:
        with open(args.input, encoding="utf-8") as f:
            numbers.extend(line.strip() for line in f if line.strip())
    return numbers


def log_progress(event: ValidationEvent) -> None:
    completed = event.payload["completed"]
    total = event.payload["total"]
    logger.info("Avanzamento: %.1f%% (%d/%d)", completed / total * 100, completed, total)


async def main(argv=None) -> int:
    args = parse_args(argv)
    numbers = load_numbers(args)
    if not numbers:
        logger.error("Nessun numero da validare")
        return 1

    config = ValidatorConfig.from_settings()
    pipeline = ValidationPipeline(MockConnection(), config)
    pipeline.events.subscribe(EventType.BATCH_PROGRESS, log_progress)

    logger.info("Validazione di %d numeri...", len(numbers))
    results = await pipeline.validate_batch(numbers, batch_size=args.batch_size)

    banned = sum(1 for r in results if r.ban.is_banned)
    logger.info("Totale: %d  Attivi: %d  Bannati: %d", len(results), len(results) - banned, banned)
    logger.info("Cache: %s", pipeline.cache_stats())

    args.output.write_text(export_json(results), encoding="utf-8")
    logger.info("Risultati salvati in %s", args.output)

    if args.csv:
        args.csv.write_text(export_csv(results), encoding="utf-8")
        logger.info("CSV salvato in %s", args.csv)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
