import sys

from loguru import logger


def setup_logger(level: str = "WARNING", log_file: str | None = None, debug: bool = False):
    """配置 Loguru 日志系统

    Args:
        level: stderr 输出级别
        log_file: 额外写入的日志文件，None 表示不写文件
        debug: 为 True 时 stderr 输出 DEBUG 级别并带上调用位置

    Returns:
        配置好的 logger 实例
    """
    # 清除默认处理器；stdout 只留给匹配结果
    logger.remove()

    if debug:
        logger.add(
            sys.stderr,
            level="DEBUG",
            format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}:{function}:{line}</cyan> - <level>{message}</level>",
        )
    else:
        logger.add(sys.stderr, level=level, format="<level>grepub: {message}</level>")

    if log_file:
        logger.add(
            log_file,
            level="DEBUG",
            rotation="10 MB",
            retention="30 days",
            encoding="utf-8",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        )
    return logger
