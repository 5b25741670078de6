"""
初始数据脚本

创建缺失的数据表，并确保存在一个管理员账户（FIRST_ADMIN_EMAIL）。
重复执行是安全的。

执行时机：
- 在 backend_pre_start 确认数据库可用之后
- python -m storefront.initial_data
"""
import logging  # 日志记录

from sqlmodel import Session  # 数据库会话

from storefront.core.db import engine, init_db  # 数据库引擎和初始化函数

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def init() -> None:
    """建表并创建初始管理员"""
    with Session(engine) as session:
        init_db(session)


def main() -> None:
    """
    主函数

    执行初始数据创建。
    """
    logger.info("Creating initial data")
    init()
    logger.info("Initial data created")


if __name__ == "__main__":  # pragma: no cover
    # 允许直接运行此脚本
    # pragma: no cover 表示这行代码在测试覆盖率中忽略
    main()
