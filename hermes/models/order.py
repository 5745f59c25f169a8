"""订单模型定义"""

from sqlalchemy import JSON, Column, DateTime, String

from ..database.connection import Base


class Order(Base):
    """订单模型

    executors 以 JSON 列保存 6 个固定岗位（按位置区分：焊工、冲压、翻边、校形、堵头焊工、切割）
    """
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, index=True)
    order_number = Column(String(50), unique=True, nullable=False, index=True)
    # 封头编号，可用作第二查找键，不要求唯一
    bottom_number = Column(String(50), nullable=False, default="", index=True)
    date = Column(String(32), nullable=False, default="", index=True)
    diameter = Column(String(32), nullable=False, default="")
    thickness = Column(String(32), nullable=False, default="")
    type_size = Column(String(100), nullable=False, default="")
    cutting = Column(String(100), nullable=False, default="")
    material = Column(String(100), nullable=False, default="", index=True)
    heat_treatment = Column(String(100), nullable=False, default="")
    treatment_date = Column(String(32), nullable=False, default="")
    executors = Column(JSON, nullable=False, default=list)
    status = Column(String(20), nullable=False, default="active")
    created_at = Column(DateTime, nullable=False, index=True)
    updated_at = Column(DateTime, nullable=False)
