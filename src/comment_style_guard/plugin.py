from data_designer.plugins.plugin import Plugin, PluginType

comment_style_plugin = Plugin(
    config_qualified_name="comment_style_guard.config.CommentStyleColumnConfig",
    impl_qualified_name="comment_style_guard.generator.CommentStyleColumnGenerator",
    plugin_type=PluginType.COLUMN_GENERATOR,
)
