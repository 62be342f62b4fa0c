from datetime import datetime, timedelta, timezone as dt_tz

JST = dt_tz(timedelta(hours=9))
EPOCH = datetime(1970, 1, 1, tzinfo=dt_tz.utc)
_MS = timedelta(milliseconds=1)

def utcnow():
    return datetime.now(dt_tz.utc)

def to_jst_iso(dt_utc):
    return dt_utc.astimezone(JST).isoformat()

def to_epoch_ms(dt):
    return (dt - EPOCH) // _MS

def from_epoch_ms(ms):
    return EPOCH + timedelta(milliseconds=int(ms))
