from papayafresh.app import run

run()
