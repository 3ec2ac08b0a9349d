import unittest

from fastapi.testclient import TestClient

from clinicalc.main import app


class TestCalculatorAPI(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def test_01_status_endpoints(self):
        print("\nAPI TEST 1: Status endpoints")
        self.assertEqual(self.client.get("/").status_code, 200)
        health = self.client.get("/health").json()
        self.assertEqual(health["status"], "active")
        self.assertEqual(health["version"], "1.0.0")
        self.assertEqual(health["calculators"], 13)

    def test_02_listing(self):
        listing = self.client.get("/calculators").json()
        self.assertEqual(len(listing), 13)
        self.assertIn({"id": "map_calculator", "name": "Presión Arterial Media (PAM)",
                       "category": "cardiovascular"}, listing)

    def test_03_references(self):
        response = self.client.get("/calculators/apgar_score/references")
        self.assertEqual(response.status_code, 200)
        references = response.json()
        self.assertEqual(len(references), 7)
        self.assertEqual(references[0]["url"], "https://dof.gob.mx")
        self.assertIsNone(references[0]["year"])

    def test_04_calculate(self):
        """Happy path returns results and the interpretation together."""
        print("\nAPI TEST 4: Calculate")
        response = self.client.post("/calculators/bmi_calculator/calculate",
                                    json={"inputs": {"height": "170", "weight": "70"}})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["calculator_id"], "bmi_calculator")
        self.assertEqual(body["result_values"]["bmi"], "24.2")
        self.assertEqual(body["input_values"], {"height": "170", "weight": "70"})
        self.assertIn("CATEGORÍA IMSS: Peso normal", body["interpretation"])
        self.assertIsInstance(body["timestamp"], int)

    def test_05_validate(self):
        response = self.client.post("/calculators/map_calculator/validate",
                                    json={"inputs": {"systolic_bp": "80", "diastolic_bp": "90"}})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {
            "is_valid": False,
            "errors": ["La presión sistólica debe ser mayor que la diastólica"],
        })

    def test_06_unknown_calculator_is_404(self):
        for response in (
            self.client.get("/calculators/nope/references"),
            self.client.post("/calculators/nope/validate", json={"inputs": {}}),
            self.client.post("/calculators/nope/calculate", json={"inputs": {}}),
        ):
            self.assertEqual(response.status_code, 404)
            self.assertEqual(response.json()["detail"], "Calculator not found: nope")

    def test_07_invalid_inputs_are_422(self):
        """Aggregated validation errors travel in the detail body."""
        response = self.client.post("/calculators/medication_dosage/calculate",
                                    json={"inputs": {"patient_weight": "70"}})
        self.assertEqual(response.status_code, 422)
        detail = response.json()["detail"]
        self.assertEqual(detail["errors"], ["La dosis por kg es obligatoria",
                                            "La concentración es obligatoria"])

    def test_08_unsupported_selector_is_422(self):
        response = self.client.post("/calculators/pediatric_dosage/calculate", json={"inputs": {
            "patient_weight": "10", "patient_age_months": "24", "medication": "Aspirina"}})
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["detail"]["message"], "Medicamento no encontrado: Aspirina")

    def test_09_overflowing_volume_is_not_a_server_error(self):
        response = self.client.post("/calculators/medication_dosage/calculate", json={"inputs": {
            "patient_weight": "70", "dose_per_kg": "5", "concentration": "1e-320"}})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["result_values"]["volume_to_administer"], "Infinity")


if __name__ == "__main__":
    unittest.main()
