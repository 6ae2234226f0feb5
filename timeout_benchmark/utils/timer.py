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

import time
from typing import Callable, Optional


class Timer:

    def __init__(self, nano_clock: Optional[Callable[[], int]] = None):
        """
        Create a started Timer.

        :param nano_clock: Optional nanosecond clock function. Defaults to time.perf_counter_ns
        """
        self.nano_clock = nano_clock if nano_clock is not None else time.perf_counter_ns
        self.start_time = self.nano_clock()

    def reset(self) -> 'Timer':
        """
        Restart the timer from now.

        :return: This timer
        """
        self.start_time = self.nano_clock()
        return self

    def elapsed_micros(self) -> int:
        """
        Get whole elapsed microseconds.
        """
        return (self.nano_clock() - self.start_time) // 1_000

    def elapsed_millis(self) -> int:
        """
        Get whole elapsed milliseconds.
        """
        return (self.nano_clock() - self.start_time) // 1_000_000

    def elapsed_seconds(self) -> float:
        """
        Get elapsed time in seconds.

        :return: Elapsed time in seconds
        """
        return (self.nano_clock() - self.start_time) / 1_000_000_000
