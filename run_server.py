"""
Run the application with uvicorn.

Equivalent to ``uvicorn portfolio:application --factory``.
"""

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "portfolio:application", factory=True, host="0.0.0.0", port=8000
    )
