from startinfo.crud.base import CRUDBase
from startinfo.models.user import User
from startinfo.schemas.course import UserCreate


class CRUDUser(CRUDBase[User, UserCreate]):
    pass

# 实例化并暴露给服务层使用
user = CRUDUser(User)
