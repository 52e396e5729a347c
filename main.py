import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Path, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from schemas import (
    MarksResponse,
    MonthPage,
    MonthPayroll,
    PayrollConfig,
    Settlement,
    SpecialDay,
    ToggleResult,
)
from paycal import YEAR
from paycal.attendance_store import AttendanceStore
from paycal.calendar_grid import build_month_page
from paycal.config import Settings, get_settings
from paycal.errors import (
    ConfirmationRequired,
    InvalidDateKey,
    RemoteStoreError,
    RemoteUnavailable,
    SettlementRejected,
    SnapshotImportError,
)
from paycal.local_storage import LocalStorage
from paycal.payroll_calculator import month_payroll, prepare_settlement
from paycal.settlement_repository import SettlementRepository
from paycal.special_days import SpecialDayTable, load_special_days
from paycal.supabase_client import create_supabase_client

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

# The wall calendar starts from February
CALENDAR_MONTHS = range(2, 13)

router = APIRouter()


# 🔸 dependencies (set on app.state by create_app)

def get_store(request: Request) -> AttendanceStore:
    return request.app.state.store


def get_special_days(request: Request) -> SpecialDayTable:
    return request.app.state.special_days


def get_repository(request: Request) -> Optional[SettlementRepository]:
    return request.app.state.repository


def require_repository(repository: Optional[SettlementRepository] = Depends(get_repository)) -> SettlementRepository:
    if repository is None:
        raise RemoteUnavailable("Remote settlements disabled: SUPABASE_URL / SUPABASE_KEY not configured")
    return repository


# 🔸 root
@router.get("/")
def root():
    return {"message": f"{YEAR} calendar"}


# 🔸 calendar

@router.get("/calendar", response_model=List[MonthPage])
def calendar_pages(special_days: SpecialDayTable = Depends(get_special_days)):
    return [build_month_page(YEAR, m, special_days) for m in CALENDAR_MONTHS]


@router.get("/calendar/{month}", response_model=MonthPage)
def calendar_page(
    month: int = Path(..., ge=1, le=12, description="1-12"),
    special_days: SpecialDayTable = Depends(get_special_days),
):
    return build_month_page(YEAR, month, special_days)


@router.get("/special-days", response_model=Dict[str, SpecialDay])
def special_days_table(special_days: SpecialDayTable = Depends(get_special_days)):
    return dict(special_days)


# 🔸 marks

@router.get("/marks", response_model=MarksResponse)
def list_marks(
    store: AttendanceStore = Depends(get_store),
    special_days: SpecialDayTable = Depends(get_special_days),
):
    return MarksResponse(marks=store.load(), summary=store.summary(special_days))


@router.post("/marks/{date_key}/toggle", response_model=ToggleResult)
def toggle_mark(date_key: str, store: AttendanceStore = Depends(get_store)):
    try:
        marked = store.toggle(date_key)
    except InvalidDateKey as e:
        raise HTTPException(status_code=422, detail=str(e))
    return ToggleResult(date_key=date_key, marked=marked)


@router.delete("/marks")
def reset_marks(
    confirm: bool = Query(False, description="must be true to clear every mark"),
    store: AttendanceStore = Depends(get_store),
):
    try:
        store.reset_all(confirm=confirm)
    except ConfirmationRequired as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"marks": {}}


@router.get("/marks/export")
def export_marks(store: AttendanceStore = Depends(get_store)):
    now = datetime.now(timezone.utc)
    filename = store.export_filename(now)
    return JSONResponse(
        content=store.export_snapshot(now),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/marks/import", response_model=MarksResponse)
async def import_marks(
    request: Request,
    store: AttendanceStore = Depends(get_store),
    special_days: SpecialDayTable = Depends(get_special_days),
):
    """
    Body is the exported JSON file as-is. Only `marks` is used.
    Existing marks are replaced on success and left alone on failure.
    """
    raw = await request.body()
    try:
        marks = await run_in_threadpool(store.import_snapshot, raw)
    except SnapshotImportError as e:
        raise HTTPException(status_code=400, detail=f"Import failed: {e}")
    summary = await run_in_threadpool(store.summary, special_days)
    return MarksResponse(marks=marks, summary=summary)


# 🔸 payroll

@router.get("/payroll/config", response_model=PayrollConfig)
def read_payroll_config(store: AttendanceStore = Depends(get_store)):
    return store.load_config()


@router.put("/payroll/config", response_model=PayrollConfig)
def update_payroll_config(config: PayrollConfig, store: AttendanceStore = Depends(get_store)):
    return store.save_config(config)


@router.get("/payroll/{month}", response_model=MonthPayroll)
def payroll_for_month(
    month: int = Path(..., ge=1, le=12),
    store: AttendanceStore = Depends(get_store),
    special_days: SpecialDayTable = Depends(get_special_days),
    repository: Optional[SettlementRepository] = Depends(get_repository),
):
    settled_months = []
    if repository is not None:
        try:
            settled_months = repository.settled_months(YEAR)
        except RemoteStoreError as e:
            raise HTTPException(status_code=502, detail=str(e))

    return month_payroll(
        store.load(),
        month,
        store.load_config(),
        settled_months=settled_months,
        special_days=special_days,
        remote_enabled=repository is not None,
    )


# 🔸 settlements (Supabase)

@router.get("/settlements", response_model=List[Settlement])
def list_settlements(repository: SettlementRepository = Depends(require_repository)):
    try:
        return repository.list_settlements(YEAR)
    except RemoteStoreError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.post("/settlements/{month}", response_model=Settlement)
def settle_month(
    month: int = Path(..., ge=1, le=12),
    store: AttendanceStore = Depends(get_store),
    repository: SettlementRepository = Depends(require_repository),
):
    """
    Settle one month. Worked days are counted again here, so marks changed after
    the payroll view was loaded are taken into account.
    """
    try:
        payload = prepare_settlement(store.load(), month, store.load_config())
    except SettlementRejected as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        return repository.upsert_settlement(YEAR, month, payload)
    except RemoteStoreError as e:
        raise HTTPException(status_code=502, detail=str(e))


def remote_unavailable_handler(request: Request, exc: RemoteUnavailable) -> JSONResponse:
    return JSONResponse(status_code=503, content={"detail": str(exc)})


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[AttendanceStore] = None,
    repository: Optional[SettlementRepository] = None,
    special_days: Optional[SpecialDayTable] = None,
) -> FastAPI:
    """
    Wire the app. Anything not passed in is built from settings (.env).
    With settings given, `repository=None` plus no Supabase config means local-only mode.
    """
    settings = settings or get_settings()

    if store is None:
        store = AttendanceStore(LocalStorage(settings.storage_path))
    if special_days is None:
        special_days = load_special_days(settings.special_days_path)
    if repository is None:
        client = create_supabase_client(settings.supabase_url, settings.supabase_key)
        repository = SettlementRepository(client) if client is not None else None

    app = FastAPI(title=f"{YEAR} calendar")

    # 🔸 CORS (all origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.store = store
    app.state.special_days = special_days
    app.state.repository = repository
    app.add_exception_handler(RemoteUnavailable, remote_unavailable_handler)
    app.include_router(router)

    logger.info("Remote settlements %s", "enabled" if repository is not None else "disabled")
    return app


app = create_app()
