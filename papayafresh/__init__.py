"""
PapayaFresh API.

FastAPI service behind the PapayaFresh mobile app: admin dashboard statistics,
user listing and deletion, and scan recording on top of Cloud Firestore and
Firebase Authentication.
"""
