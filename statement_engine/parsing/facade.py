import pandas as pd
from typing import Optional, Tuple

from statement_engine.common.models import ExtractionResult, quantize_amount
from statement_engine.common.settings import Settings
from .config.registry import FormatRegistry
from .pipeline import ExtractionPipeline

TRANSACTION_COLUMNS = [
    'date', 'description', 'debit', 'credit', 'amount', 'balance',
    'type', 'status', 'line_number', 'messages',
]


class StatementFacade:
    """
    Entry point for the reporting side: text in, DataFrame out.

    Builds the registry and pipeline once so repeated calls share the
    loaded formats.
    """

    def __init__(self, settings: Optional[Settings] = None, registry: Optional[FormatRegistry] = None):
        self.settings = settings or Settings.from_env()
        self.registry = registry or FormatRegistry.from_settings(self.settings)
        self.pipeline = ExtractionPipeline(self.registry, self.settings)

    def extract(self, text: str, bank_id: Optional[str] = None) -> ExtractionResult:
        if bank_id:
            return self.pipeline.extract_by_format_id(text, bank_id)
        return self.pipeline.extract(text)

    def parse(self, text: str, bank_id: Optional[str] = None) -> Tuple[pd.DataFrame, dict]:
        """
        Returns: (pd.DataFrame, dict) -> (transactions, metadata)
        """
        result = self.extract(text, bank_id)
        return self.to_dataframe(result), self.metadata(result)

    def to_dataframe(self, result: ExtractionResult) -> pd.DataFrame:
        """One row per transaction, amounts rounded to the output precision."""
        if not result.transactions:
            return pd.DataFrame(columns=TRANSACTION_COLUMNS)

        places = self.settings.decimal_places
        rows = []
        for t in result.transactions:
            rows.append({
                'date': t.date,
                'description': t.description,
                'debit': quantize_amount(t.debit, places),
                'credit': quantize_amount(t.credit, places),
                'amount': quantize_amount(t.amount, places),
                'balance': quantize_amount(t.balance, places),
                'type': t.transaction_type,
                'status': t.processing_status,
                'line_number': t.line_number,
                'messages': ' | '.join(t.error_messages),
            })

        df = pd.DataFrame(rows, columns=TRANSACTION_COLUMNS)
        df['date'] = pd.to_datetime(df['date'], format='%Y-%m-%d', errors='coerce').dt.date
        return df

    def metadata(self, result: ExtractionResult) -> dict:
        data = result.to_dict(self.settings.decimal_places)
        data.pop('transactions')
        return data
