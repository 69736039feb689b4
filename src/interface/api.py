from __future__ import annotations

from dataclasses import asdict
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query, Response, status
from pydantic import ValidationError

from application import exporter
from application.service import LedgerService
from domain.models import Category, SortDirection
from domain.schemas import (
    AdviceResponse,
    CashFlowSliceResponse,
    CategorySummaryResponse,
    DailyBucketResponse,
    SortKey,
    TotalsResponse,
    Transaction,
    TransactionForm,
    ViewQuery,
)
from interface.cli import build_service


def _view_query(
    category: List[Category],
    start: Optional[str],
    end: Optional[str],
    sort_key: SortKey = "date",
    sort_direction: SortDirection = SortDirection.DESC,
) -> ViewQuery:
    try:
        return ViewQuery(
            categories=category,
            start=start,
            end=end,
            sort_key=sort_key,
            sort_direction=sort_direction,
        )
    except ValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail=[err["msg"] for err in exc.errors()],
        ) from exc


def create_app(service: LedgerService | None = None) -> FastAPI:
    service = service or build_service()
    app = FastAPI(title="Spendwise API")
    app.state.service = service

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/transactions", response_model=List[Transaction])
    def list_transactions(
        category: List[Category] = Query(default=[]),
        start: Optional[str] = None,
        end: Optional[str] = None,
        sort_key: SortKey = "date",
        sort_direction: SortDirection = SortDirection.DESC,
    ) -> List[Transaction]:
        return service.view(_view_query(category, start, end, sort_key, sort_direction))

    @app.post("/transactions", response_model=Transaction, status_code=status.HTTP_201_CREATED)
    def add_transaction(form: TransactionForm) -> Transaction:
        return service.add(form)

    @app.put("/transactions/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
    def update_transaction(transaction_id: str, form: TransactionForm) -> Response:
        service.update(transaction_id, form)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.delete("/transactions/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_transaction(transaction_id: str) -> Response:
        service.delete(transaction_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.get("/stats", response_model=TotalsResponse)
    def stats() -> TotalsResponse:
        return TotalsResponse(**asdict(service.stats()))

    @app.get("/summary/categories", response_model=List[CategorySummaryResponse])
    def summary(
        category: List[Category] = Query(default=[]),
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> List[CategorySummaryResponse]:
        query = _view_query(category, start, end)
        return [CategorySummaryResponse(**asdict(item)) for item in service.category_summary(query)]

    @app.get("/series/daily", response_model=List[DailyBucketResponse])
    def daily() -> List[DailyBucketResponse]:
        return [DailyBucketResponse(**asdict(bucket)) for bucket in service.daily_series()]

    @app.get("/series/cash-flow", response_model=List[CashFlowSliceResponse])
    def cash_flow() -> List[CashFlowSliceResponse]:
        return [CashFlowSliceResponse(**asdict(item)) for item in service.cash_flow()]

    @app.get("/export")
    def export() -> Response:
        content = service.export_csv()
        if not content:
            return Response(status_code=status.HTTP_204_NO_CONTENT)
        filename = exporter.export_filename()
        return Response(
            content=content,
            media_type=exporter.EXPORT_MEDIA_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @app.post("/insights", response_model=AdviceResponse)
    async def insights() -> AdviceResponse:
        return AdviceResponse(advice=await service.advice())

    return app


app = create_app()
