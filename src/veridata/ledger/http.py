# src/veridata/ledger/http.py

import logging
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from veridata.ledger.base import Ledger

logger = logging.getLogger(__name__)


class LedgerServiceError(RuntimeError):
    """The remote ledger answered with an unexpected status."""


class HttpLedger(Ledger):
    """
    Client for a remote balance ledger exposed over HTTP.

    Endpoints (JSON):
        POST {base_url}/transfer  {"from", "to", "amount"} -> 200 | 402
        POST {base_url}/mint      {"to", "amount"}         -> 200
        GET  {base_url}/balances/{account}                 -> {"balance": int}

    A 402 response on transfer means insufficient funds and maps to False.
    Transport failures propagate as requests exceptions so that the caller
    aborts without committing anything.
    """

    def __init__(self, base_url: str, api_key: str = "", timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        # POSTs are never retried
        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers["User-Agent"] = "VeriData-Ledger/1.0"
        if self.api_key:
            session.headers["Authorization"] = f"Bearer {self.api_key}"
        return session

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        response = self.session.post(
            f"{self.base_url}/transfer",
            json={"from": sender, "to": recipient, "amount": amount},
            timeout=self.timeout,
        )
        if response.status_code == 402:
            logger.info(f"Ledger refused transfer of {amount} from {sender}")
            return False
        if response.status_code != 200:
            raise LedgerServiceError(
                f"Ledger transfer failed with status {response.status_code}"
            )
        return True

    def mint(self, recipient: str, amount: int) -> None:
        response = self.session.post(
            f"{self.base_url}/mint",
            json={"to": recipient, "amount": amount},
            timeout=self.timeout,
        )
        if response.status_code != 200:
            raise LedgerServiceError(
                f"Ledger mint failed with status {response.status_code}"
            )

    def balance_of(self, account: str) -> int:
        response = self.session.get(
            f"{self.base_url}/balances/{quote(account)}", timeout=self.timeout
        )
        if response.status_code == 404:
            return 0
        response.raise_for_status()
        return int(response.json().get("balance", 0))
