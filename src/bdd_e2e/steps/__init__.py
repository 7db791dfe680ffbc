from . import api_steps, auth_steps, browser_steps, dashboard_steps

STEP_MODULES = [auth_steps, dashboard_steps, browser_steps, api_steps]


def load_steps(registry):
    """Register the built-in step catalog on registry"""
    for module in STEP_MODULES:
        registry.register_from_module(module)
    return registry


__all__ = ['STEP_MODULES', 'load_steps']
