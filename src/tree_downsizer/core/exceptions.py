"""项目内使用的自定义异常定义。"""


class TreeDownsizerError(Exception):
    """基础异常类型。"""


class InvalidConfigurationError(TreeDownsizerError):
    """配置不合法时抛出。"""


class WalkError(TreeDownsizerError):
    """目录遍历本身失败（根目录不可读、子目录无法访问等）。"""


class ProcessingAborted(WalkError):
    """任务被取消信号中断时抛出。"""
