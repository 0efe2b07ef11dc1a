"""
Configuration for Commandcord.

- **options.py**: typed FrameworkOptions plus the database option union
  (MongoDatabaseOptions / GenericDatabaseOptions) and directory validation.
- **app_configuration.py**: file-locked YAML loader that turns
  ``config/app_config.yml`` into FrameworkOptions.
"""
