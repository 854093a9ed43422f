import sys
import logging

from config import load_config
from csv_io import InputError, write_accounts
from engine import LedgerEngine

logger = logging.getLogger(__name__)

EXIT_USAGE = 1
EXIT_INPUT_ERROR = 2


def main(argv=None) -> int:
    argv = sys.argv if argv is None else argv
    config = load_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    if len(argv) != 2:
        print(f"Usage: {argv[0] if argv else 'ledger-replay'} <input.csv>", file=sys.stderr)
        return EXIT_USAGE

    filepath = argv[1]
    engine = LedgerEngine(num_workers=config.num_workers)
    try:
        accounts = engine.process_file(filepath)
    except InputError as e:
        logger.error(str(e))
        return EXIT_INPUT_ERROR

    write_accounts(accounts.values())
    return 0


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
