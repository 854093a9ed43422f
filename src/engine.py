import logging
import threading
from typing import Dict, List, Optional, Sequence

from csv_io import load_transactions
from ledger import LedgerProcessor
from message_queue import ShardedQueue
from models import ClientAccount, ProcessingStats, Transaction
from transaction_index import TransactionIndex

logger = logging.getLogger(__name__)


class LedgerEngine:
    """
    Replays a complete transaction sequence into final client balances.

    The (client, tx) index is built over the whole sequence before any record
    is applied. With more than one worker, records are sharded by client id:
    each worker owns the accounts of its shard and applies that shard's records
    in input order, then the shards are merged.
    """

    def __init__(self, num_workers: int = 1):
        if num_workers < 1:
            raise ValueError(f"num_workers must be at least 1, got {num_workers}")
        self._num_workers = num_workers
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        """Counters for the most recent run only."""
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        stats = ProcessingStats()
        transactions = load_transactions(filepath, stats)
        return self._run(transactions, stats)

    def replay(self, transactions: Sequence[Transaction]) -> Dict[int, ClientAccount]:
        """Apply every transaction and return a new client id -> account mapping."""
        return self._run(transactions, ProcessingStats())

    def _run(self, transactions: Sequence[Transaction], stats: ProcessingStats) -> Dict[int, ClientAccount]:
        self._stats = stats
        index = TransactionIndex.build(transactions)
        logger.info(f"Indexed {len(index)} amount-bearing transactions")

        if self._num_workers == 1:
            accounts = self._replay_sequential(transactions, index)
        else:
            accounts = self._replay_sharded(transactions, index)

        logger.info(f"Replay complete for {len(accounts)} clients. {self._stats}")
        return accounts

    def _replay_sequential(self, transactions: Sequence[Transaction], index: TransactionIndex) -> Dict[int, ClientAccount]:
        processor = LedgerProcessor(index)
        for transaction in transactions:
            self._stats.record_result(processor.process_transaction(transaction))
        return processor.accounts

    def _replay_sharded(self, transactions: Sequence[Transaction], index: TransactionIndex) -> Dict[int, ClientAccount]:
        queue = ShardedQueue(self._num_workers)
        processors = [LedgerProcessor(index) for _ in range(self._num_workers)]
        errors: List[BaseException] = []

        publisher_thread = threading.Thread(target=self._publish_transactions, args=(queue, transactions))
        publisher_thread.start()

        worker_threads = []
        for shard, processor in enumerate(processors):
            worker_thread = threading.Thread(target=self._consume_shard, args=(queue, shard, processor, errors))
            worker_thread.start()
            worker_threads.append(worker_thread)

        publisher_thread.join()
        queue.shutdown()
        for worker_thread in worker_threads:
            worker_thread.join()

        if errors:
            raise errors[0]

        # Shards own disjoint client ids, so the merge never overwrites.
        accounts: Dict[int, ClientAccount] = {}
        for processor in processors:
            accounts.update(processor.accounts)
        return accounts

    def _publish_transactions(self, queue: ShardedQueue, transactions: Sequence[Transaction]) -> None:
        for transaction in transactions:
            queue.publish_message(transaction)

    def _consume_shard(
        self,
        queue: ShardedQueue,
        shard: int,
        processor: LedgerProcessor,
        errors: List[BaseException],
    ) -> None:
        """Worker loop: drain one shard in order until the publisher is done."""
        try:
            while True:
                transaction: Optional[Transaction] = queue.consume_message(shard)
                if transaction is None:
                    if queue.is_shutdown() and queue.is_empty(shard):
                        break
                    continue
                self._stats.record_result(processor.process_transaction(transaction))
        except Exception as e:
            logger.exception(f"Worker for shard {shard} failed")
            errors.append(e)
