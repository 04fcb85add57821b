"""Dev entry point: python -m mail_delivery."""
from mail_delivery.app import create_app
from mail_delivery.bootstrap import build_service
from mail_delivery.config import DeliveryConfig, GatewayConfig, SmtpConfig
from mail_delivery.runtime import LoopThread


def main() -> None:
    gateway_config = GatewayConfig()
    delivery_config = DeliveryConfig()
    smtp_config = SmtpConfig()

    service = build_service(delivery_config, smtp_config)
    loop = LoopThread().start()
    app = create_app(
        service,
        loop,
        smtp_config=smtp_config,
        gateway_config=gateway_config,
        log_level=delivery_config.log_level,
    )
    app.run(host=gateway_config.host, port=gateway_config.port)


if __name__ == "__main__":
    main()
