"""
Asynchronous page rasterization with stale-result discarding.
"""
from .generations import RenderGenerations
from .render_worker import RenderWorker

__all__ = ['RenderGenerations', 'RenderWorker']
