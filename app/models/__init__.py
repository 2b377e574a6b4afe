"""
Models package
MongoDB 콜렉션 데이터 모델 및 Repository

MongoDB Collections:
- userCollection: 사용자 (프로필, 통계, 로그인 보안 필드, 체인 참조)
- messagesCollection / notificationsCollection / activityHistoriesCollection: 사용자별 체인
- gadgetsCollection: 가젯 (예약 캘린더 포함)
- rentalOrdersCollection: 대여 주문
- saga_transaction_log: 사가 실행/보상 기록
"""
