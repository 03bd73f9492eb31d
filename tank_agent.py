"""
Grid Tank Agent server
Explores a grid with A* and engages enemies that line up with it.

Usage:
    python tank_agent.py --port 8001

To run multiple agents:
    python tank_agent.py --port 8001  # Tank 1
    python tank_agent.py --port 8002  # Tank 2
"""

from __future__ import annotations

import argparse

from fastapi import FastAPI, HTTPException
import uvicorn

from tank_core.agent import GridTankAgent
from tank_core.config import DEFAULT_SHOT_CAP, AgentConfig
from tank_core.observation import ActionCommand, EndPayload, Observation


app = FastAPI(
    title="Grid Tank Agent",
    description="Explore/battle FSM tank agent with A* pathfinding",
    version="1.0.0",
)

# Global agent instance
agent = GridTankAgent()


@app.get("/")
async def root():
    return {"message": f"Agent {agent.name} is running", "destroyed": agent.is_destroyed}


@app.post("/agent/action", response_model=ActionCommand)
async def get_action(observation: Observation):
    """Main endpoint called each tick by the engine."""
    try:
        command = agent.get_action(observation)
    except ValueError as exc:
        # Grid size is fixed by the first observation of the game.
        raise HTTPException(status_code=422, detail=str(exc))
    return ActionCommand.from_command(command)


@app.post("/agent/destroy", status_code=204)
async def destroy():
    agent.destroy()


@app.post("/agent/end", status_code=204)
async def end(payload: EndPayload):
    agent.end(kills=payload.kills, score=payload.score)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run grid tank agent")
    parser.add_argument("--host", type=str, default="0.0.0.0", help="Host address")
    parser.add_argument("--port", type=int, default=8001, help="Port number")
    parser.add_argument("--name", type=str, default=None, help="Agent name")
    parser.add_argument("--seed", type=int, default=None, help="Seed for exploration targets")
    parser.add_argument("--shot-cap", type=int, default=DEFAULT_SHOT_CAP, help="Battle ticks per engagement")
    parser.add_argument("--trace-every", type=int, default=0, help="Print map every N ticks (0 = off)")
    return parser


def main(argv=None) -> None:
    global agent
    args = build_parser().parse_args(argv)

    config = AgentConfig(seed=args.seed, shot_cap=args.shot_cap, trace_every=args.trace_every)
    name = args.name or f"GridTank_{args.port}"
    agent = GridTankAgent(name=name, config=config)

    print(f"Starting {agent.name} on {args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port, log_level="warning", access_log=False)


if __name__ == "__main__":
    main()
