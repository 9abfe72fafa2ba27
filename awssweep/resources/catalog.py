from awssweep.registry import SweeperRegistry
from awssweep.resources import apigateway, kms

RESOURCE_MODULES = (apigateway, kms)


def build_registry():
    registry = SweeperRegistry()
    for module in RESOURCE_MODULES:
        module.register(registry)
    return registry
