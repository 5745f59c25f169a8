"""业务服务层：对账导入、CSV / 备份编解码、订单服务"""

from . import backup, csv_codec, exceptions, orders, reconcile

__all__ = ["backup", "csv_codec", "exceptions", "orders", "reconcile"]
