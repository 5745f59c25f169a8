"""订单API路由

订单的增删改查、统计、搜索，以及 CSV 导入导出、JSON 备份恢复和清空数据。
固定路径（/stats、/export/csv 等）必须定义在 /{order_id} 之前。
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from ... import schemas
from ...config.settings import settings
from ...crud import OrderStore
from ...database.connection import get_db
from ...services import backup, csv_codec
from ...services import orders as order_service
from ...services.exceptions import FormatError
from ...utils.helpers import utcnow

router = APIRouter(prefix="/orders", tags=["orders"])


def get_store(db: Session = Depends(get_db)) -> OrderStore:
    """每个请求基于自己的会话构造存储对象"""
    return OrderStore(db)


def _read_upload(file: UploadFile) -> bytes:
    data = file.file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise FormatError(f"Uploaded file exceeds {settings.MAX_UPLOAD_BYTES} bytes")
    return data


@router.get("", response_model=List[schemas.OrderRead])
def list_orders_endpoint(
    sort_by: str = Query("createdAt", description="排序字段"),
    sort_order: str = Query("desc", description="asc / desc"),
    search: Optional[str] = Query(None, description="订单号、封头编号或材料关键字"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    store: OrderStore = Depends(get_store),
):
    """获取订单列表"""
    return order_service.list_orders(store, sort_by, sort_order, search, skip, limit)


@router.post("", response_model=schemas.OrderRead, status_code=201)
def create_order_endpoint(order: schemas.OrderCreate, store: OrderStore = Depends(get_store)):
    """创建新订单"""
    return order_service.create_order(store, order)


@router.get("/stats", response_model=schemas.OrderStats)
def order_stats_endpoint(store: OrderStore = Depends(get_store)):
    return order_service.order_stats(store)


@router.get("/search", response_model=List[schemas.OrderRead])
def search_orders_endpoint(
    q: Optional[str] = None,
    limit: int = Query(20, ge=1, le=500),
    store: OrderStore = Depends(get_store),
):
    """关键字搜索（至少 2 个字符）"""
    return order_service.search_orders(store, q, limit)


@router.get("/export/csv")
def export_csv_endpoint(
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    material: Optional[str] = None,
    store: OrderStore = Depends(get_store),
):
    """导出 CSV 文件"""
    content = order_service.export_orders_csv(store, date_from, date_to, material)
    filename = f"orders_export_{utcnow().date().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.post("/import/csv", response_model=schemas.ImportResult)
def import_csv_endpoint(
    file: UploadFile = File(...),
    overwrite: bool = Form(False),
    lookup_field: schemas.LookupField = Form(schemas.LookupField.ORDER_NUMBER),
    store: OrderStore = Depends(get_store),
):
    """导入 CSV：按订单号或封头编号查找已有记录，决定插入、更新或跳过"""
    text = csv_codec.decode_csv_bytes(_read_upload(file))
    return order_service.import_orders_csv(store, text, overwrite=overwrite, lookup_field=lookup_field)


@router.get("/backup")
def backup_endpoint(store: OrderStore = Depends(get_store)):
    """下载全部订单的 JSON 备份"""
    payload = order_service.export_backup(store)
    return JSONResponse(
        content=payload,
        headers={"Content-Disposition": f"attachment; filename={backup.backup_filename(payload['timestamp'])}"},
    )


@router.post("/backup/restore", response_model=schemas.RestoreResult)
def restore_backup_endpoint(file: UploadFile = File(...), store: OrderStore = Depends(get_store)):
    """从备份恢复：清空现有数据并整体写入（同一事务）"""
    return order_service.restore_backup(store, _read_upload(file))


@router.post("/delete", response_model=schemas.BulkDeleteResult)
def delete_orders_endpoint(payload: schemas.BulkDeleteRequest, store: OrderStore = Depends(get_store)):
    """按 id 批量删除订单"""
    return order_service.delete_orders(store, payload.ids)


@router.delete("/clear-all", response_model=schemas.ClearResult)
def clear_all_endpoint(store: OrderStore = Depends(get_store)):
    """删除全部订单"""
    return schemas.ClearResult(deleted=order_service.clear_orders(store))


@router.get("/{order_id}", response_model=schemas.OrderRead)
def get_order_endpoint(order_id: str, store: OrderStore = Depends(get_store)):
    return order_service.get_order(store, order_id)


@router.put("/{order_id}", response_model=schemas.OrderRead)
def update_order_endpoint(order_id: str, order_update: schemas.OrderUpdate, store: OrderStore = Depends(get_store)):
    """更新订单"""
    return order_service.update_order(store, order_id, order_update)


@router.delete("/{order_id}")
def delete_order_endpoint(order_id: str, store: OrderStore = Depends(get_store)):
    """删除指定ID的订单"""
    order_service.delete_order(store, order_id)
    return {"message": "Order deleted successfully"}
