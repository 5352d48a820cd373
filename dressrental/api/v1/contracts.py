from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from dressrental.api.v1.schemas import (
    ContractCreatedSchema,
    ContractCreateRequestSchema,
    DraftRequestSchema,
    IssueSchema,
    QuoteResponseSchema,
    RemainingSchema,
    TotalsSchema,
)
from dressrental.application.exceptions import BackendUpstreamError
from dressrental.application.use_cases.contract_draft import ContractDraftUseCase, ValidationResult
from dressrental.application.use_cases.pricing import remaining_balances
from dressrental.application.utils.money import round_money
from dressrental.domain.entities.contract_totals import ContractTotals
from dressrental.domain.entities.contract_type import ContractMode
from dressrental.domain.entities.customer import Customer
from dressrental.wiring.dependencies import get_contract_draft_use_case

router = APIRouter()


def _issues(result: ValidationResult) -> list[dict[str, str]]:
    return [IssueSchema(code=i.code, message=i.message).model_dump() for i in result.issues]


def _totals(totals: ContractTotals) -> TotalsSchema:
    return TotalsSchema(
        **{key: value if key == "days" else round_money(value) for key, value in asdict(totals).items()}
    )


async def _prepare_draft(uc: ContractDraftUseCase, req: DraftRequestSchema) -> None:
    """Drive a fresh draft through selection and configuration from a request body."""
    try:
        uc.open(mode=req.mode, start=req.start, end=req.end)
        uc.choose_dress(req.dress_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    configured = uc.configure()
    if not configured.ok:
        raise HTTPException(status_code=422, detail=_issues(configured))

    try:
        if req.mode == ContractMode.package:
            if req.package_id:
                uc.select_package(req.package_id)
            if req.dress_ids:
                uc.set_package_dresses(req.dress_ids)
        if req.addon_ids is not None:
            wanted = set(req.addon_ids)
            unknown = wanted - {addon.id for addon in uc.reference.addons}
            if unknown:
                raise ValueError(f"Unknown add-on: {sorted(unknown)[0]}")
            for addon in uc.reference.addons:
                uc.toggle_addon(addon.id, selected=addon.id in wanted)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if req.mode == ContractMode.daily:
        await uc.refresh_price_quote()
    if req.deposit_paid_ttc is not None:
        uc.set_deposit_paid(req.deposit_paid_ttc)
    if req.caution_paid_ttc is not None:
        uc.set_caution_paid(req.caution_paid_ttc)


@router.post("/contracts/quote", response_model=QuoteResponseSchema)
async def quote(
    req: DraftRequestSchema,
    uc: ContractDraftUseCase = Depends(get_contract_draft_use_case),
):
    try:
        await _prepare_draft(uc, req)
    except BackendUpstreamError as e:
        raise HTTPException(status_code=502, detail=str(e))

    draft = uc.draft
    remaining = remaining_balances(draft.totals)
    return QuoteResponseSchema(
        mode=draft.mode,
        contract_type_id=draft.contract_type_id,
        dress_ids=list(draft.dress_ids),
        package_id=draft.package_id,
        addon_ids=[addon.id for addon in uc.reference.addons if addon.id in draft.selected_addon_ids],
        totals=_totals(draft.totals),
        remaining=RemainingSchema(
            deposit_ht=round_money(remaining.deposit_ht),
            deposit_ttc=round_money(remaining.deposit_ttc),
            caution_ht=round_money(remaining.caution_ht),
            caution_ttc=round_money(remaining.caution_ttc),
            total_ht=round_money(remaining.total_ht),
            total_ttc=round_money(remaining.total_ttc),
            is_fully_paid=remaining.is_fully_paid,
        ),
    )


@router.post("/contracts", response_model=ContractCreatedSchema, status_code=201)
async def create_contract(
    req: ContractCreateRequestSchema,
    uc: ContractDraftUseCase = Depends(get_contract_draft_use_case),
):
    try:
        await _prepare_draft(uc, req)
    except BackendUpstreamError as e:
        raise HTTPException(status_code=502, detail=str(e))

    uc.select_customer(Customer(id=req.customer_id))
    try:
        uc.set_payment_method(req.payment_method)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    result = uc.submit()
    if not result.ok:
        if result.error:
            raise HTTPException(status_code=502, detail=result.error)
        raise HTTPException(status_code=422, detail=_issues(result.validation))

    return ContractCreatedSchema(
        id=result.record.id,
        contract_number=result.record.contract_number,
        status=result.record.status,
        totals=_totals(uc.draft.totals),
    )
