"""
Config Module - Black Box Interface

Purpose: Plugin options and their validation
Interface: EssoOptions, RenameOptions, ConfigProvider, EnvConfigProvider
Hidden: Environment parsing, default merging

Options are resolved once when the plugin is built and never change after.
"""

from .provider import ConfigProvider, EnvConfigProvider, EssoOptions, RenameOptions

__all__ = ["ConfigProvider", "EnvConfigProvider", "EssoOptions", "RenameOptions"]
