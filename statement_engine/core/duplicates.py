from typing import Dict, List, Tuple

from statement_engine.common.models import Finding, FindingCode, Severity, Transaction


class DuplicateDetector:
    """
    Flags transactions that repeat an earlier (date, amount, description).

    Repeats are flagged for review, never removed: two identical coffee
    purchases on the same day are legitimate but still get a warning.
    """

    def detect(self, transactions: List[Transaction]) -> List[Finding]:
        findings = []
        seen: Dict[Tuple, int] = {}

        for index, t in enumerate(transactions):
            key = (t.date, t.amount, t.description)
            if key in seen:
                findings.append(Finding(
                    code=FindingCode.DUPLICATE_TRANSACTION,
                    message=f"Potential duplicate transaction at index {index}",
                    severity=Severity.MEDIUM,
                    context={
                        'transaction_index': index,
                        'duplicate_of': seen[key],
                        'line_number': t.line_number,
                    },
                ))
            else:
                seen[key] = index

        return findings
