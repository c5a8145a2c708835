from .add_workflow import handle_add_buttons, handle_add_workflow, start_add_workflow
from .remove_workflow import handle_remove_buttons, send_remove_prompt

__all__ = [
    "handle_add_buttons",
    "handle_add_workflow",
    "start_add_workflow",
    "handle_remove_buttons",
    "send_remove_prompt",
]
