import time

from .actions import ActionsMixin
from .connection import ConnectionMixin
from .payer import PayerMixin
from .program import ProgramMixin
from .rpc import RpcClient
from hellochain.config import ClusterSettings


class ProgramClient(ConnectionMixin, PayerMixin, ProgramMixin, ActionsMixin):
    """
    Client for the hello and mech programs. Composes connection setup, fee payer
    handling, program checks and action submission via mixins.
    """
    def __init__(self, settings=None, session=None, rpc=None, sleep=time.sleep):
        self.settings = settings or ClusterSettings()
        self.rpc = rpc or RpcClient(
            self.settings.rpc_url,
            session=session,
            commitment=self.settings.commitment,
            timeout=self.settings.request_timeout,
        )
        self.sleep = sleep
        self.version = None
        self.payer = None
        self.program_id = None
        self.counter_pubkey = None
