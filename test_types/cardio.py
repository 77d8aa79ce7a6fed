from __future__ import annotations

from fce import categorization
from fce.cardio import cardio_kind
from test_types.base import BaseTestType, TestGroup, make_group

# Inputs each protocol needs for scoring
_SCORING_INPUTS = {
    "bruce": ["totalTime"],
    "mcaft": ["lastCompletedStage"],
    "kasch": ["recoveryHeartRate"],
    "ymca-step": ["recoveryHeartRate"],
    "ymca-treadmill": ["speed", "heartRate"],
}


class CardioHandler(BaseTestType):

    @property
    def test_type_id(self) -> str:
        return "cardio"

    @property
    def display_name(self) -> str:
        return "Cardio"

    @property
    def keywords(self) -> list[str]:
        return ["cardio", "aerobic", "treadmill", "step test", "vo2", "heart rate", "cardiovascular"]

    @property
    def category(self) -> str:
        return categorization.CARDIO

    def groups(self) -> list[TestGroup]:
        return [
            make_group("cardio-tests", "Various", [
                ("mcaft-step-test", "mCAFT Step Test"),
                ("kasch-step-test", "KASCH Step Test"),
                ("bruce-treadmill-test", "Bruce Treadmill Test"),
                ("ymca-step-test", "YMCA 3-Minute Step Test"),
                ("ymca-submaximal-treadmill-test", "YMCA Submaximal Treadmill Test"),
            ]),
        ]

    def describe_test(self, test_id: str) -> dict:
        test = self.get_test(test_id)
        if test is None:
            return {}
        kind = cardio_kind({"testId": test.id, "testName": test.name})
        return {"cardioKind": kind, "scoringInputs": _SCORING_INPUTS.get(kind, [])}
