import os
import re
from pathlib import Path
from typing import Any, Dict, Type, List

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, create_model

load_dotenv()

VARIABLE_PATTERN = re.compile(r'\$\{([^}]+)\}')

def load_yaml(file_path: str) -> dict:
    config_path = Path(file_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file '{file_path}' does not exist.")

    with config_path.open('r') as f:
        config_data = yaml.safe_load(f)

    if not isinstance(config_data, dict):
        raise ValueError("Configuration file must contain a YAML dictionary at the root.")

    return config_data

def resolve_variable(expression: str, root_config: Dict[str, Any]) -> Any:
    """
    Resolves a single ${...} expression.

    Supported forms:
        ${General.APP_NAME}            dotted key elsewhere in the config
        ${FIREBASE_PROJECT_ID}         environment variable
        ${FIREBASE_PROJECT_ID:-demo}   environment variable with a default

    Config keys win over environment variables of the same name.

    :param expression: The text between the braces.
    :param root_config: The full (root) configuration dictionary.
    :return: The resolved value.
    """
    name, has_default, default = expression.partition(':-')
    name = name.strip()

    value = root_config
    for key in name.split('.'):
        if not isinstance(value, dict) or key not in value:
            value = None
            break
        value = value[key]
    if value is not None:
        return value

    env_value = os.getenv(name)
    if env_value is not None:
        return env_value
    if has_default:
        return default

    raise ValueError(f"Variable '{name}' not found in configuration or environment.")

def interpolate_config(config: Any, root_config: Dict[str, Any] = None, visited: set = None) -> Any:
    """
    Recursively interpolates ${...} placeholders in the config.

    :param config: The (sub) configuration to interpolate.
    :param root_config: The root configuration used to resolve dotted keys.
    :param visited: Expressions currently being resolved, to detect cycles.
    :return: The interpolated configuration.
    """
    if root_config is None:
        root_config = config
    if visited is None:
        visited = set()

    if isinstance(config, dict):
        return {key: interpolate_config(value, root_config, visited) for key, value in config.items()}
    if isinstance(config, list):
        return [interpolate_config(item, root_config, visited) for item in config]
    if not isinstance(config, str):
        return config

    matches = VARIABLE_PATTERN.findall(config)
    # A value that is exactly one placeholder keeps the resolved type
    if len(matches) == 1 and config == f"${{{matches[0]}}}":
        expression = matches[0]
        if expression in visited:
            raise ValueError(f"Circular reference detected for variable '{expression}'.")
        visited.add(expression)
        resolved = interpolate_config(resolve_variable(expression, root_config), root_config, visited)
        visited.remove(expression)
        return resolved

    value = config
    for expression in matches:
        if expression in visited:
            raise ValueError(f"Circular reference detected for variable '{expression}'.")
        visited.add(expression)
        resolved = interpolate_config(resolve_variable(expression, root_config), root_config, visited)
        visited.remove(expression)
        if not isinstance(resolved, (str, int, float)):
            raise ValueError(f"Variable '{expression}' is of unsupported type {type(resolved)} for interpolation.")
        value = value.replace(f"${{{expression}}}", str(resolved))
    return value

def generate_pydantic_model(
    model_name: str,
    data: Any,
    model_cache: Dict[str, Type[BaseModel]] = None
) -> Type[BaseModel]:
    """
    Recursively generates Pydantic models from a nested dictionary,
    handling lists appropriately.

    :param model_name: Name of the Pydantic model to create.
    :param data: The data to create the model from (dict, list, or primitive).
    :param model_cache: A cache to store already created models to handle recursion.
    :return: A Pydantic BaseModel subclass.
    """
    if model_cache is None:
        model_cache = {}

    if isinstance(data, dict):
        fields = {}
        for key, value in data.items():
            field_name = key.replace('-', '_').replace(' ', '_')

            if isinstance(value, dict):
                nested_model_name = f"{model_name}_{key.capitalize()}"
                nested_model = model_cache.get(nested_model_name) \
                    or generate_pydantic_model(nested_model_name, value, model_cache)
                fields[field_name] = (nested_model, ...)
            elif isinstance(value, list):
                fields[field_name] = (generate_pydantic_model(f"{model_name}_{key.capitalize()}", value, model_cache), ...)
            elif value is None:
                fields[field_name] = (Any, None)
            else:
                fields[field_name] = (type(value), ...)

        model = create_model(model_name, **fields)
        model_cache[model_name] = model
        return model

    elif isinstance(data, list):
        if len(data) > 0 and isinstance(data[0], dict):
            nested_model = generate_pydantic_model(f"{model_name}Item", data[0], model_cache)
            return List[nested_model]
        return List[type(data[0])] if len(data) > 0 else List[Any]

    else:
        return type(data)

def generate_config_model(config_data: dict) -> Type[BaseModel]:
    """
    Generates the root Pydantic model for the configuration.

    :param config_data: The configuration data as a dictionary.
    :return: The root Pydantic model class.
    """
    return generate_pydantic_model("AppConfig", config_data)

CONFIG_FILE_PATH = os.getenv('CONFIG_FILE_PATH', str(Path(__file__).parent / 'config.yaml'))

# Load YAML configuration
config_data = load_yaml(CONFIG_FILE_PATH)

# Interpolate variables
interpolated_config = interpolate_config(config_data)

# Generate the root Pydantic model
AppConfigModel = generate_config_model(interpolated_config)

# Instantiate the model with interpolated configuration data
settings = AppConfigModel(**interpolated_config)
