# File: campus_issues/routers/map.py
# Project: campus-issues-backend

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from campus_issues.db.session import get_db
from campus_issues.repositories.issues import IssueRepository
from campus_issues.schemas.map import CustomPinIn, LocateIn, LocateOut, MapPinOut
from campus_issues.services.campus_map import CampusMap, PinBoard

router = APIRouter(prefix="/map", tags=["map"])

campus_map = CampusMap.from_settings()
# process-local; custom pins are never written to the database
pin_board = PinBoard(campus_map)

@router.get("/pins", response_model=List[MapPinOut])
def list_pins(db: Session = Depends(get_db)):
    issue_pins = campus_map.issue_pins(IssueRepository(db).list())
    return [campus_map.place(p) for p in issue_pins + pin_board.pins()]

@router.get("/pins/{pin_id}", response_model=MapPinOut)
def pin_detail(pin_id: str, db: Session = Depends(get_db)):
    pin = pin_board.select(pin_id)
    if pin is None and pin_id.isdigit():
        issue = IssueRepository(db).get(int(pin_id))
        pins = campus_map.issue_pins([issue]) if issue else []
        pin = pins[0] if pins else None
    if pin is None:
        raise HTTPException(status_code=404, detail="Pin not found")
    return campus_map.place(pin)

@router.post("/locate", response_model=LocateOut)
def locate(body: LocateIn):
    lat, lng = campus_map.to_coordinates(body.x, body.y)
    return {"lat": lat, "lng": lng, "address": campus_map.describe(lat, lng)}

@router.post("/pins", response_model=MapPinOut, status_code=201)
def add_pin(body: CustomPinIn):
    pin = pin_board.add(body.x, body.y, body.title, body.description or "")
    return campus_map.place(pin)

@router.delete("/pins/{pin_id}")
def remove_pin(pin_id: str):
    if not pin_board.remove(pin_id):
        raise HTTPException(status_code=404, detail="Pin not found")
    return {"ok": True}
