from .config import MomoConfig, load_config, is_configured
from .client import MemoryBackend, MomoClient, MomoError
from .hooks import HookManager, HookEvent, HookContext, HookResult
from .plugin import MomoPlugin, create_plugin
from .tools import MomoTools, NotConfiguredError, execute_tool
