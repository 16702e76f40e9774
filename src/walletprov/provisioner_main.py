"""Command-line entry point: provision one wallet from a JSON parameter bag.

Reads settings from the environment (see ``envs/provisioner_env.py``) and the
wallet parameters as a JSON object on stdin. ``WALLET_OPERATION`` selects
``generate`` (default) or ``add``. The result is printed as JSON; plaintext
private keys are never printed.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys
from typing import Any, Literal

from .application.wallets.use_cases.provisioning import ProvisioningService
from .application.wallets.use_cases.wallet_validators import validate_generate
from .domain.errors import ProvisioningError, RequestError, ValidationError
from .envs.provisioner_env import Settings, get_settings
from .infrastructure.wallet_service.wallet_service_client import (
    AsyncWalletServiceClient,
)

logger = logging.getLogger(__name__)

Operation = Literal["generate", "add"]


def validate_operation(operation: str) -> Operation:
    if operation not in {"generate", "add"}:
        raise RuntimeError("WALLET_OPERATION must be 'generate' or 'add'")
    return operation  # type: ignore[return-value]


def build_service(settings: Settings) -> ProvisioningService:
    def client_factory() -> AsyncWalletServiceClient:
        return AsyncWalletServiceClient(
            settings.wallet_api_base_url,
            settings.coin,
            timeout=settings.http_timeout,
            access_token=settings.access_token,
        )

    return ProvisioningService(client_factory)


async def provision(
    service: ProvisioningService, operation: Operation, params: dict[str, Any]
) -> dict[str, Any]:
    if operation == "add":
        wallet = await service.add(params)
        return wallet.model_dump(mode="json", by_alias=True, exclude_none=True)

    validated = validate_generate(params)
    # The generated user private key is only ever emitted encrypted here
    if validated.user_key is None and validated.passphrase is None:
        raise ValidationError(
            "passphrase",
            "string",
            "cannot generate user keypair without passphrase",
        )
    result = await service.generate_wallet(validated)
    return result.model_dump(mode="json", by_alias=True, exclude_none=True)


def _error_document(error: ProvisioningError) -> dict[str, Any]:
    document: dict[str, Any] = {"error": str(error), "type": type(error).__name__}
    if isinstance(error, ValidationError):
        document.update(field=error.field, expected=error.expected)
    elif isinstance(error, RequestError):
        document.update(status=error.status_code, body=error.body)
    return document


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    operation = validate_operation(os.environ.get("WALLET_OPERATION", "generate"))

    params = json.load(sys.stdin)
    if not isinstance(params, dict):
        raise SystemExit("Wallet parameters must be a JSON object")

    logger.info(
        "Provisioning (%s) on %s for %r", operation, settings.coin, params.get("label")
    )
    service = build_service(settings)
    try:
        output = asyncio.run(provision(service, operation, params))
    except ValidationError as e:
        print(json.dumps(_error_document(e)), file=sys.stderr)
        sys.exit(2)
    except ProvisioningError as e:
        print(json.dumps(_error_document(e)), file=sys.stderr)
        sys.exit(1)

    print(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
