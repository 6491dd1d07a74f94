from hts_compliance.web.db import db


class BaseModel(db.Model):
    __abstract__ = True

    @classmethod
    def find_by(cls, **kwargs):
        return cls.query.filter_by(**kwargs).first()

    @classmethod
    def all_ordered(cls, *order_by):
        return cls.query.order_by(*order_by).all()
