"""Token usage helpers for FindingStore."""

from penpard.db.models import TokenUsage


class TokenUsageMixin:
    """Provide token accounting writes and totals."""

    def record_token_usage(
        self,
        provider: str,
        model: str | None,
        input_tokens: int,
        output_tokens: int,
        *,
        scan_id: str | None = None,
        context: str | None = None,
    ) -> TokenUsage:
        usage = TokenUsage(
            provider=provider,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_tokens=input_tokens + output_tokens,
            scan_id=scan_id,
            context=context,
        )
        # Called from generation worker threads; never touches the shared session.
        with self.session_factory() as session:
            session.add(usage)
            session.commit()
        return usage

    def get_token_totals(self, scan_id: str | None = None) -> dict[str, int]:
        """Sum recorded tokens, optionally for one scan."""
        query = self.session.query(TokenUsage)
        if scan_id is not None:
            query = query.filter_by(scan_id=scan_id)
        totals = {"input_tokens": 0, "output_tokens": 0, "total_tokens": 0}
        for row in query:
            totals["input_tokens"] += row.input_tokens or 0
            totals["output_tokens"] += row.output_tokens or 0
            totals["total_tokens"] += row.total_tokens or 0
        return totals
