"""Notify 异常体系"""


class NotifyError(Exception):
    """Notify 包基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过重投或降级恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class WebhookUnreachableError(NotifyError):
    """Webhook 不可达（连接失败、超时、DNS 解析失败等）

    此异常触发 FallbackSink 的降级逻辑。
    """

    def __init__(self, url: str, original_error: Exception) -> None:
        """
        Args:
            url: 尝试投递的 Webhook 地址
            original_error: 原始异常
        """
        super().__init__(
            f"Webhook 不可达: {url} -- {original_error}",
            recoverable=True,
        )
        self.url = url
        self.original_error = original_error


class DeliveryRejectedError(NotifyError):
    """Webhook 返回非 2xx 状态码"""

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(
            f"Webhook 拒绝投递: {url} -- HTTP {status_code}",
            recoverable=status_code >= 500,
        )
        self.url = url
        self.status_code = status_code
