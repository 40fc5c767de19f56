"""HTTP routers for the TacoTrack API"""
