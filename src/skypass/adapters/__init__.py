# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Adapters for running the propagation engine outside the caller's thread.

Threading and executor concerns are confined to this layer.
"""
from skypass.adapters.propagation_worker import PropagationWorker

__all__ = ["PropagationWorker"]
