"""
应用启动前检查脚本

在应用启动前等待依赖服务就绪：
- 数据库：必须可用，重试最多 5 分钟，仍失败则退出
- Redis：只用于通知广播，短暂重试后仍不可用只记录警告，不阻止启动

执行流程：
1. 容器启动命令中先运行 python -m storefront.backend_pre_start
2. 再运行 python -m storefront.initial_data 建表并创建管理员
3. 最后启动 uvicorn
"""
import logging  # 日志记录

from sqlalchemy import Engine  # SQLAlchemy 引擎类型
from sqlmodel import Session, select  # SQLModel 会话和查询
from tenacity import (  # 重试库，用于实现重试机制
    RetryError,  # 重试次数用尽
    after_log,  # 重试后的日志记录
    before_log,  # 重试前的日志记录
    retry,  # 重试装饰器
    stop_after_attempt,  # 停止条件：达到最大尝试次数
    wait_fixed,  # 等待策略：固定间隔
)

from storefront.core.config import settings
from storefront.core.db import engine  # 数据库引擎
from storefront.core.redis import get_redis

# 配置日志
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# 重试配置
max_tries = 60 * 5  # 数据库最大尝试次数：300 次（5 分钟，每秒一次）
redis_max_tries = 10  # Redis 最大尝试次数
wait_seconds = 1  # 每次重试间隔：1 秒


@retry(
    stop=stop_after_attempt(max_tries),  # 最多尝试 300 次后停止
    wait=wait_fixed(wait_seconds),  # 每次重试前等待 1 秒
    before=before_log(logger, logging.INFO),  # 重试前记录 INFO 级别日志
    after=after_log(logger, logging.WARN),  # 重试后记录 WARN 级别日志
)
def init(db_engine: Engine) -> None:
    """
    检查数据库是否可用

    执行 select(1)，失败时抛出异常触发重试。
    """
    try:
        with Session(db_engine) as session:
            session.exec(select(1))
    except Exception as e:
        logger.error(e)
        raise e


@retry(
    stop=stop_after_attempt(redis_max_tries),
    wait=wait_fixed(wait_seconds),
    before=before_log(logger, logging.INFO),
    after=after_log(logger, logging.WARN),
)
def check_redis() -> None:
    """检查 Redis 是否可用（PING）"""
    get_redis().ping()


def main() -> None:
    """
    主函数

    数据库不可用时抛出异常退出；Redis 不可用时只记录警告。
    """
    logger.info("Initializing service")
    init(engine)
    if settings.NOTIFICATIONS_ENABLED:
        try:
            check_redis()
        except RetryError:
            logger.warning("Redis is unreachable, notifications will be dropped until it recovers")
    logger.info("Service finished initializing")


if __name__ == "__main__":  # pragma: no cover
    # 允许直接运行此脚本
    main()
