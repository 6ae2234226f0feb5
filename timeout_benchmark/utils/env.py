# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import os
from typing import TypeVar, Callable, Optional

T = TypeVar('T')

ENV_PREFIX = "TIMEOUT_BENCHMARK_"


class Env:

    def __init__(self):
        raise RuntimeError("Env class should not be instantiated")

    @staticmethod
    def get_int(key: str, default_value: Optional[int] = None) -> Optional[int]:
        return Env.get(key, int, default_value)

    @staticmethod
    def get_float(key: str, default_value: Optional[float] = None) -> Optional[float]:
        return Env.get(key, float, default_value)

    @staticmethod
    def get_bool(key: str, default_value: Optional[bool] = None) -> Optional[bool]:
        return Env.get(key, lambda v: v.strip().lower() in ('1', 'true', 'yes', 'on'), default_value)

    @staticmethod
    def get_str(key: str, default_value: Optional[str] = None) -> Optional[str]:
        return Env.get(key, str, default_value)

    @staticmethod
    def get(key: str, function: Callable[[str], T], default_value: Optional[T]) -> Optional[T]:
        """
        Read ``TIMEOUT_BENCHMARK_<key>`` and convert it.

        Unset, empty or unparsable values fall back to the default.
        """
        env_value = os.getenv(ENV_PREFIX + key)
        if env_value:
            try:
                return function(env_value)
            except (ValueError, TypeError):
                return default_value
        return default_value
