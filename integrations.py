"""
Mock data providers for the Flowlu and Blue.cc integrations.
Both return fixed illustrative data; the api_key is accepted for signature
compatibility with a real client but not sent anywhere.
"""

import logging
from typing import Optional

from api.pydantic_models import BlueCCSnapshot

FLOWLU_PROJECT_SUMMARY = "[Flowlu 同步] 專案: 太陽能一期 (進行中), 員工 DEI 工作坊 (已完成), 供應鏈稽核 (規劃中)"
BLUECC_SCOPE3_TONNES = 4500
BLUECC_SUPPLIER_COUNT = 128


def fetch_flowlu_projects(api_key: Optional[str] = None) -> str:
    logging.info("Returning mock Flowlu project summary.")
    return FLOWLU_PROJECT_SUMMARY


def fetch_bluecc_data(api_key: Optional[str] = None) -> BlueCCSnapshot:
    logging.info("Returning mock Blue.cc emissions snapshot.")
    return BlueCCSnapshot(scope3=BLUECC_SCOPE3_TONNES, suppliers=BLUECC_SUPPLIER_COUNT)
