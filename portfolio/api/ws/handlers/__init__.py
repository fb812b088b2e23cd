import importlib
import pkgutil
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from portfolio.routing import MessageDispatcher
    from portfolio.services.registry import Services


def load_handlers(
    dispatcher: "MessageDispatcher", services: "Services"
) -> None:
    """
    Imports every module in the handlers package and lets it register its
    handlers on ``dispatcher`` through its ``register_handlers`` function.
    """
    for _, module_name, _ in pkgutil.iter_modules(__path__):
        module = importlib.import_module(f"{__name__}.{module_name}")
        register = getattr(module, "register_handlers", None)
        if register is not None:
            register(dispatcher, services)
