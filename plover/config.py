# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Configuration values are read from the environment first, then from a
`plover.yaml` file in the working directory, then fall back to defaults.

Lowering never reads these module values directly, they are captured in a
`LoweringConfig` which is passed through each lowering call.
"""

import logging
import typing
from dataclasses import dataclass
from os import environ
from pathlib import Path

from plover.exceptions import InvalidConfigurationError

logger = logging.getLogger(__name__)

_config_values: dict = {}

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


def parse_yaml(yaml_str):
    def line_value(value):
        value = value.strip()
        if value.isdigit():
            value = int(value)
        elif value.replace(".", "", 1).isdigit():
            value = float(value)
        elif value.lower() == "true":
            return True
        elif value.lower() == "false":
            return False
        elif value.lower() == "none":
            return None
        elif value.startswith("["):
            return [val.strip() for val in value[1:-1].split(",")]
        return value

    result: dict = {}
    lines = yaml_str.strip().split("\n")
    key = ""
    value: typing.Any = ""
    in_list = False
    list_key = ""
    for line in lines:
        ## remove comments
        line = line.split("#")[0]
        line = line.strip()
        if not line:
            continue
        if in_list:
            if line.startswith("- "):
                result[list_key].append(line[2:].strip())
                continue
            in_list = False
        key, value = line.split(":", 1)
        if not value.split():
            in_list = True
            list_key = key.strip()
            result[list_key] = []
        else:
            result[key.strip()] = line_value(value)
    return result


try:  # pragma: no cover
    _config_path = Path(".") / "plover.yaml"
    if _config_path.exists():
        with open(_config_path, "r") as _config_file:
            _config_values = parse_yaml(_config_file.read())
        logger.debug("Loading config from %s", _config_path)
except (OSError, ValueError) as exception:  # pragma: no cover
    logger.debug("Config file %s not used - %s", _config_path, exception)


def get(key, default=None):
    value = environ.get(key)
    if value is None:
        value = _config_values.get(key, default)
    return value


def get_bool(key, default: bool = False) -> bool:
    value = get(key, default)
    if isinstance(value, bool):
        return value
    if str(value).strip().lower() in _TRUE_VALUES:
        return True
    if str(value).strip().lower() in _FALSE_VALUES:
        return False
    raise InvalidConfigurationError(
        config_item=key, provided_value=value, valid_value_description="'true' or 'false'."
    )


# fmt:off

# lower LOWER() and UPPER() to the native case conversion functions
ENABLE_CASE_CONVERT_FUNCTIONS: bool = get_bool("PLOVER_ENABLE_CASE_CONVERT_FUNCTIONS", True)
# lower GET_JSON_OBJECT and the Hive UDFJson function natively
ENABLE_UDF_JSON: bool = get_bool("PLOVER_ENABLE_UDF_JSON", True)
# lower the brickhouse UDF and UDAF families natively
ENABLE_BRICKHOUSE_UDFS: bool = get_bool("PLOVER_ENABLE_BRICKHOUSE_UDFS", True)
# debug mode, log every lowering decision
PLOVER_DEBUG: bool = get_bool("PLOVER_DEBUG", False)

# fmt:on


@dataclass(frozen=True)
class LoweringConfig:
    """
    Read-only feature flags consulted while lowering.

    Attributes:
        case_convert_functions: bool
            Lower LOWER/UPPER to the native extension functions.
        udf_json: bool
            Lower JSON path extraction to the native parsed-json functions.
        brickhouse_udfs: bool
            Lower the brickhouse UDF/UDAF family natively.
    """

    case_convert_functions: bool = True
    udf_json: bool = True
    brickhouse_udfs: bool = True

    @classmethod
    def from_environment(cls) -> "LoweringConfig":
        return cls(
            case_convert_functions=ENABLE_CASE_CONVERT_FUNCTIONS,
            udf_json=ENABLE_UDF_JSON,
            brickhouse_udfs=ENABLE_BRICKHOUSE_UDFS,
        )
